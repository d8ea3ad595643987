"""
Answer Evaluator - Scores a submitted or skipped multiple-choice answer.
"""

from pydantic import BaseModel, ConfigDict, Field

from smart_tutor.engines.practice.exceptions import InvalidQuestion
from smart_tutor.engines.practice.question_bank import Question
from smart_tutor.engines.practice.types import Rating


class EvaluationResult(BaseModel):
    """Outcome of scoring one answer. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool
    earned_points: int = Field(ge=0)
    max_points: int
    rating: Rating
    accuracy: int  # 100 if correct, else 0
    time_spent_ms: int = Field(ge=0)
    feedback: str


class AnswerEvaluator:
    """
    Scores answers: exact index match, base points plus a 20% bonus for
    answers under 30 seconds, and a rating by response time.
    A skip is submitted as SKIPPED_ANSWER and is always incorrect.
    """

    SKIPPED_ANSWER = -1
    FAST_ANSWER_MS = 30_000
    GOOD_ANSWER_MS = 60_000
    TIME_BONUS_PERCENT = 20

    @classmethod
    def evaluate(
        cls,
        question: Question,
        submitted_index: int,
        time_spent_ms: int,
    ) -> EvaluationResult:
        """
        Evaluate a single answer.

        Raises:
            InvalidQuestion: if the question's correct index is out of range
            ValueError: if time_spent_ms is negative
        """
        cls._check_question(question)
        if time_spent_ms < 0:
            raise ValueError(f"time_spent_ms must be >= 0, got {time_spent_ms}")

        is_correct = submitted_index == question.correct_answer_index
        base_points = question.points
        earned_points = 0
        rating = Rating.POOR

        if is_correct:
            earned_points = base_points
            if time_spent_ms < cls.FAST_ANSWER_MS:
                earned_points += base_points * cls.TIME_BONUS_PERCENT // 100
                rating = Rating.EXCELLENT
            elif time_spent_ms < cls.GOOD_ANSWER_MS:
                rating = Rating.GOOD
            else:
                rating = Rating.AVERAGE

        prefix = "Correct!" if is_correct else "Incorrect."
        return EvaluationResult(
            is_correct=is_correct,
            earned_points=earned_points,
            max_points=base_points,
            rating=rating,
            accuracy=100 if is_correct else 0,
            time_spent_ms=int(time_spent_ms),
            feedback=f"{prefix} {question.explanation}",
        )

    @classmethod
    def _check_question(cls, question: Question) -> None:
        """Questions built with model_construct() skip validation; re-check the contract here."""
        options = question.options or []
        if len(options) < 2:
            raise InvalidQuestion(f"Question {question.id} has fewer than two options")
        if not 0 <= question.correct_answer_index < len(options):
            raise InvalidQuestion(
                f"Question {question.id} has correct_answer_index "
                f"{question.correct_answer_index} for {len(options)} options"
            )
        if question.points <= 0:
            raise InvalidQuestion(f"Question {question.id} has non-positive points {question.points}")
