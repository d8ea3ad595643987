"""
Pydantic schemas for the practice API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from smart_tutor.engines.practice.evaluator import EvaluationResult
from smart_tutor.engines.practice.progress import ProgressEvent, SessionStatistics, SessionSummary
from smart_tutor.engines.practice.types import ProficiencyTier, QuestionSource, SkillLabel


class SubjectInfo(BaseModel):
    """A subject available for practice."""

    subject: str
    display_name: str
    tiers: List[ProficiencyTier]


class SubjectListResponse(BaseModel):
    subjects: List[SubjectInfo]
    default_subject: str


class PlacementRequest(BaseModel):
    """Diagnostic assessment score."""

    percentage: float = Field(ge=0, le=100)


class PlacementResponse(BaseModel):
    label: SkillLabel
    description: str
    initial_tier: ProficiencyTier
    assessment_score: float


class SessionStartRequest(BaseModel):
    """Session preferences supplied once at start."""

    subject: str = Field(min_length=1)
    initial_tier: ProficiencyTier = ProficiencyTier.BASIC
    topic_hint: Optional[str] = None


class PresentedQuestion(BaseModel):
    """Question as shown to the learner; the correct index is withheld."""

    id: str
    subject: str
    tier: ProficiencyTier
    text: str
    code_example: Optional[str] = None
    options: List[str]
    points: int
    topic: Optional[str] = None
    source: QuestionSource


class SessionView(BaseModel):
    """Current state of a practice session."""

    session_id: str
    subject: str
    state: str
    current_tier: ProficiencyTier
    consecutive_correct: int
    completion_checkpoint: int
    question: Optional[PresentedQuestion] = None
    statistics: SessionStatistics
    accuracy: float
    summary: Optional[SessionSummary] = None


class AnswerRequest(BaseModel):
    selected_index: int = Field(ge=0)


class EvaluationResponse(BaseModel):
    """Result of a submit or skip, with the answer revealed."""

    session_id: str
    question_id: str
    submitted_index: Optional[int] = None
    skipped: bool
    correct_answer_index: int
    evaluation: EvaluationResult
    statistics: SessionStatistics
    tier_changed: bool
    new_tier: ProficiencyTier
    completed: bool
    summary: Optional[SessionSummary] = None


class ContinueRequest(BaseModel):
    extra_questions: Optional[int] = Field(default=None, gt=0)


class ProgressHistoryResponse(BaseModel):
    session_id: str
    events: List[ProgressEvent]


class AbandonResponse(BaseModel):
    session_id: str
    state: str
    abandoned_at: datetime
