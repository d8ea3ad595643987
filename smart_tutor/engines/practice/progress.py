"""
Progress - Running session statistics and the progress events handed to the caller.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from smart_tutor.engines.practice.evaluator import EvaluationResult
from smart_tutor.engines.practice.types import ProficiencyTier


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatistics(BaseModel):
    """Running totals for one practice session."""

    total_questions: int = 0
    correct_answers: int = 0
    total_points: int = 0
    average_time_ms: float = 0.0

    @property
    def accuracy(self) -> float:
        """Percentage of answered questions that were correct (0 before any answer)."""
        if self.total_questions == 0:
            return 0.0
        return 100.0 * self.correct_answers / self.total_questions

    def record(self, evaluation: EvaluationResult) -> None:
        """Fold one evaluation into the totals; the average is updated incrementally."""
        old_count = self.total_questions
        new_count = old_count + 1
        self.average_time_ms = (
            (self.average_time_ms * old_count) + evaluation.time_spent_ms
        ) / new_count
        self.total_questions = new_count
        if evaluation.is_correct:
            self.correct_answers += 1
        self.total_points += evaluation.earned_points

    def snapshot(self) -> "SessionStatistics":
        return self.model_copy()


class TierChange(BaseModel):
    """A tier transition and the question count when it happened."""

    from_tier: ProficiencyTier
    to_tier: ProficiencyTier
    after_question: int


class ProgressEvent(BaseModel):
    """Emitted after every submit or skip."""

    session_id: str
    question_id: str
    submitted_index: Optional[int]  # None when skipped
    skipped: bool = False
    evaluation: EvaluationResult
    statistics: SessionStatistics
    tier_changed: bool
    new_tier: ProficiencyTier
    recorded_at: datetime = Field(default_factory=_utcnow)


class SessionSummary(BaseModel):
    """End-of-session report surfaced when the completion checkpoint is reached."""

    session_id: str
    subject: str
    total_questions: int
    correct_answers: int
    total_points: int
    accuracy: float  # Rounded percentage
    average_time_ms: float
    starting_tier: ProficiencyTier
    final_tier: ProficiencyTier
    tier_changes: List[TierChange] = []


class ProgressSink(Protocol):
    """Receives progress events; persistence is the implementer's concern."""

    def record(self, event: ProgressEvent) -> None:
        ...


class InMemoryProgressSink:
    """
    Keeps progress events in memory, grouped by session.

    Used by the HTTP layer and tests; a durable profile store would implement
    the same record() method.
    """

    def __init__(self):
        self._events: Dict[str, List[ProgressEvent]] = {}

    def record(self, event: ProgressEvent) -> None:
        self._events.setdefault(event.session_id, []).append(event)

    def events_for(self, session_id: str) -> List[ProgressEvent]:
        return list(self._events.get(session_id, []))

    def latest(self, session_id: str) -> Optional[ProgressEvent]:
        events = self._events.get(session_id)
        return events[-1] if events else None

    def discard(self, session_id: str) -> None:
        self._events.pop(session_id, None)
