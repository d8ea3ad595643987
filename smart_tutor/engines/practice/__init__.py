"""
Practice Engine - Adaptive multiple-choice practice.

Components:
- QuestionBank: curated pools per subject and tier (basic, intermediate, advanced)
- QuestionProvider: remote generation with bank fallback and anti-repetition
- AnswerEvaluator: correctness, points with time bonus, rating
- ProficiencyController: one-step tier promotion/demotion, assessment placement

Scoring:
- Base points per tier: 10 / 20 / 30
- +20% bonus for correct answers under 30 seconds
- Promotion: accuracy > 85% with 3 correct in a row
- Demotion: accuracy < 50%
"""

from smart_tutor.engines.practice.evaluator import AnswerEvaluator, EvaluationResult
from smart_tutor.engines.practice.exceptions import InvalidQuestion, NoQuestionAvailable
from smart_tutor.engines.practice.proficiency import Placement, ProficiencyController
from smart_tutor.engines.practice.progress import (
    InMemoryProgressSink,
    ProgressEvent,
    ProgressSink,
    SessionStatistics,
    SessionSummary,
    TierChange,
)
from smart_tutor.engines.practice.question_bank import Question, QuestionBank
from smart_tutor.engines.practice.question_provider import QuestionProvider, UsedQuestionSet
from smart_tutor.engines.practice.types import (
    ProficiencyTier,
    QuestionSource,
    Rating,
    SkillLabel,
)

__all__ = [
    "AnswerEvaluator",
    "EvaluationResult",
    "InvalidQuestion",
    "NoQuestionAvailable",
    "Placement",
    "ProficiencyController",
    "InMemoryProgressSink",
    "ProgressEvent",
    "ProgressSink",
    "SessionStatistics",
    "SessionSummary",
    "TierChange",
    "Question",
    "QuestionBank",
    "QuestionProvider",
    "UsedQuestionSet",
    "ProficiencyTier",
    "QuestionSource",
    "Rating",
    "SkillLabel",
]
