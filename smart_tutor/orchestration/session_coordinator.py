"""
Session Coordinator - Drives one practice session.

Loop: request question -> present -> submit/skip -> evaluate -> update
statistics, streak and tier -> emit progress -> continue or complete.

The coordinator owns the session's statistics and its question provider
(and through it the used-question set). Generation requests are serialised:
a new request is rejected while one is pending, and abandoning the session
cancels the pending request so its result never touches session state.
"""

import asyncio
import time
import uuid
from typing import Callable, List, Optional, Type

from pydantic import BaseModel

from smart_tutor.engines.practice.evaluator import AnswerEvaluator, EvaluationResult
from smart_tutor.engines.practice.exceptions import NoQuestionAvailable
from smart_tutor.engines.practice.proficiency import ProficiencyController
from smart_tutor.engines.practice.progress import (
    ProgressEvent,
    ProgressSink,
    SessionStatistics,
    SessionSummary,
    TierChange,
)
from smart_tutor.engines.practice.question_bank import Question
from smart_tutor.engines.practice.question_provider import QuestionProvider
from smart_tutor.engines.practice.types import ProficiencyTier
from smart_tutor.logging_config import bind_session_id, get_logger
from smart_tutor.orchestration.state_machine import SessionState, SessionStateMachine

logger = get_logger(__name__)


class SessionPreferences(BaseModel):
    """Supplied once when the session starts."""

    subject: str
    initial_tier: ProficiencyTier = ProficiencyTier.BASIC
    topic_hint: Optional[str] = None


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SessionCoordinator:
    """
    Orchestrates question flow, scoring and tier changes for one session.

    Completion fires when total_questions reaches the completion checkpoint
    (initially the threshold). continue_practice() keeps the statistics and
    moves the checkpoint forward by the increment the caller chooses.
    """

    DEFAULT_COMPLETION_THRESHOLD = 10

    def __init__(
        self,
        preferences: SessionPreferences,
        provider: QuestionProvider,
        progress_sink: Optional[ProgressSink] = None,
        completion_threshold: int = DEFAULT_COMPLETION_THRESHOLD,
        statistics: Optional[SessionStatistics] = None,
        evaluator: Type[AnswerEvaluator] = AnswerEvaluator,
        controller: Type[ProficiencyController] = ProficiencyController,
        clock: Callable[[], float] = _monotonic_ms,
        session_id: Optional[str] = None,
    ):
        if completion_threshold <= 0:
            raise ValueError("completion_threshold must be positive")
        self.session_id = session_id or uuid.uuid4().hex
        self.preferences = preferences
        self.completion_threshold = completion_threshold
        self.statistics = statistics if statistics is not None else SessionStatistics()

        self._provider = provider
        self._sink = progress_sink
        self._evaluator = evaluator
        self._controller = controller
        self._clock = clock
        self._machine = SessionStateMachine()

        self.starting_tier = ProficiencyTier(preferences.initial_tier)
        self.current_tier = self.starting_tier
        self.consecutive_correct = 0
        self.tier_changes: List[TierChange] = []

        self.current_question: Optional[Question] = None
        self.selected_index: Optional[int] = None
        self.last_evaluation: Optional[EvaluationResult] = None
        self.last_event: Optional[ProgressEvent] = None
        self.summary: Optional[SessionSummary] = None

        self._completion_at = completion_threshold
        self._presented_at_ms: Optional[float] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def completion_checkpoint(self) -> int:
        """Question count at which the session next reports completion."""
        return self._completion_at

    @property
    def request_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    # ── Question flow ────────────────────────────────────────────────

    async def request_question(self) -> Optional[Question]:
        """
        Fetch and present the next question.

        Returns None if the session was abandoned while the request was in flight.
        Raises InvalidTransition if called while another request is pending or
        outside Idle/Evaluated, and NoQuestionAvailable if the bank is empty for
        the subject (the session returns to its previous state).
        """
        with bind_session_id(self.session_id):
            self._machine.require(SessionState.IDLE, SessionState.EVALUATED)
            return await self._fetch_question()

    async def continue_practice(self, extra_questions: Optional[int] = None) -> Optional[Question]:
        """
        Resume after completion without resetting statistics.

        Args:
            extra_questions: Questions until completion is reported again
                (defaults to the completion threshold)
        """
        with bind_session_id(self.session_id):
            self._machine.require(SessionState.COMPLETED)
            increment = self.completion_threshold if extra_questions is None else extra_questions
            if increment <= 0:
                raise ValueError("extra_questions must be positive")
            self._completion_at = self.statistics.total_questions + increment
            logger.info(
                "Continuing practice",
                extra={"total_questions": self.statistics.total_questions, "next_checkpoint": self._completion_at},
            )
            return await self._fetch_question()

    async def _fetch_question(self) -> Optional[Question]:
        previous = self._machine.transition(SessionState.AWAITING_QUESTION)
        self.current_question = None
        self.selected_index = None
        self.last_evaluation = None

        self._pending = asyncio.ensure_future(
            self._provider.next(
                self.preferences.subject,
                self.current_tier,
                self.preferences.topic_hint,
            )
        )
        try:
            question = await self._pending
        except asyncio.CancelledError:
            if self._machine.state is SessionState.ABANDONED:
                logger.info("Discarded in-flight question request for abandoned session")
                return None
            self._machine.restore(previous)
            raise
        except NoQuestionAvailable:
            self._machine.restore(previous)
            logger.warning(
                "No question available",
                extra={"subject": self.preferences.subject, "tier": self.current_tier.value},
            )
            raise
        except Exception:
            self._machine.restore(previous)
            raise
        finally:
            self._pending = None

        if self._machine.state is SessionState.ABANDONED:
            return None

        self._machine.transition(SessionState.PRESENTING)
        self.current_question = question
        self.selected_index = None
        self._presented_at_ms = self._clock()
        logger.info(
            "Presenting question",
            extra={
                "question_id": question.id,
                "tier": question.tier.value,
                "source": question.source.value,
            },
        )
        return question

    def select_option(self, index: int) -> None:
        """Select an answer option for the presented question."""
        self._machine.require(SessionState.PRESENTING)
        options = self.current_question.options if self.current_question else []
        if not 0 <= index < len(options):
            raise ValueError(f"Option index {index} out of range for {len(options)} options")
        self.selected_index = index

    # ── Evaluation ───────────────────────────────────────────────────

    def submit(self) -> EvaluationResult:
        """Score the selected option. Requires a prior select_option()."""
        with bind_session_id(self.session_id):
            self._machine.require(SessionState.PRESENTING)
            if self.selected_index is None:
                raise ValueError("No option selected")
            return self._evaluate(self.selected_index, skipped=False)

    def skip(self) -> EvaluationResult:
        """Skip the presented question; scored as incorrect and resets the streak."""
        with bind_session_id(self.session_id):
            self._machine.require(SessionState.PRESENTING)
            return self._evaluate(AnswerEvaluator.SKIPPED_ANSWER, skipped=True)

    def _evaluate(self, submitted_index: int, skipped: bool) -> EvaluationResult:
        question = self.current_question
        time_spent_ms = max(0, int(self._clock() - (self._presented_at_ms or 0)))

        # InvalidQuestion propagates before any state changes
        evaluation = self._evaluator.evaluate(question, submitted_index, time_spent_ms)
        self._machine.transition(SessionState.EVALUATED)

        self.statistics.record(evaluation)
        self.consecutive_correct = self.consecutive_correct + 1 if evaluation.is_correct else 0

        previous_tier = self.current_tier
        new_tier = self._controller.next_tier(
            previous_tier,
            self.statistics.accuracy,
            self.consecutive_correct,
        )
        tier_changed = new_tier != previous_tier
        if tier_changed:
            self.current_tier = new_tier
            self.tier_changes.append(
                TierChange(
                    from_tier=previous_tier,
                    to_tier=new_tier,
                    after_question=self.statistics.total_questions,
                )
            )
            logger.info("Tier changed: %s -> %s", previous_tier.value, new_tier.value)

        event = ProgressEvent(
            session_id=self.session_id,
            question_id=question.id,
            submitted_index=None if skipped else submitted_index,
            skipped=skipped,
            evaluation=evaluation,
            statistics=self.statistics.snapshot(),
            tier_changed=tier_changed,
            new_tier=new_tier,
        )
        self.last_evaluation = evaluation
        self.last_event = event
        if self._sink is not None:
            self._sink.record(event)

        logger.info(
            "Answer evaluated",
            extra={
                "question_id": question.id,
                "correct": evaluation.is_correct,
                "skipped": skipped,
                "earned_points": evaluation.earned_points,
                "total_questions": self.statistics.total_questions,
            },
        )

        if self.statistics.total_questions >= self._completion_at:
            self._machine.transition(SessionState.COMPLETED)
            self.summary = self.build_summary()
            logger.info(
                "Session completed",
                extra={"total_questions": self.statistics.total_questions, "accuracy": self.summary.accuracy},
            )
        return evaluation

    # ── Session end ──────────────────────────────────────────────────

    def abandon(self) -> None:
        """Exit the session; an in-flight question request is cancelled and discarded."""
        with bind_session_id(self.session_id):
            if self._machine.state is SessionState.ABANDONED:
                return
            self._machine.transition(SessionState.ABANDONED)
            if self._pending is not None and not self._pending.done():
                self._pending.cancel()
            self.current_question = None
            self.selected_index = None
            logger.info("Session abandoned", extra={"total_questions": self.statistics.total_questions})

    def build_summary(self) -> SessionSummary:
        stats = self.statistics
        return SessionSummary(
            session_id=self.session_id,
            subject=self.preferences.subject,
            total_questions=stats.total_questions,
            correct_answers=stats.correct_answers,
            total_points=stats.total_points,
            accuracy=round(stats.accuracy, 1),
            average_time_ms=stats.average_time_ms,
            starting_tier=self.starting_tier,
            final_tier=self.current_tier,
            tier_changes=list(self.tier_changes),
        )
