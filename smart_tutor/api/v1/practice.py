"""
Practice endpoints - subjects, placement, and the adaptive question session loop.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from smart_tutor.api.deps import Coordinator, Registry
from smart_tutor.engines.practice.exceptions import NoQuestionAvailable
from smart_tutor.engines.practice.proficiency import ProficiencyController
from smart_tutor.engines.practice.question_bank import Question
from smart_tutor.engines.practice.types import SUBJECT_DISPLAY_NAMES
from smart_tutor.orchestration.session_coordinator import SessionCoordinator, SessionPreferences
from smart_tutor.orchestration.state_machine import InvalidTransition, SessionState
from smart_tutor.schemas.practice import (
    AbandonResponse,
    AnswerRequest,
    ContinueRequest,
    EvaluationResponse,
    PlacementRequest,
    PlacementResponse,
    PresentedQuestion,
    ProgressHistoryResponse,
    SessionStartRequest,
    SessionView,
    SubjectInfo,
    SubjectListResponse,
)

router = APIRouter()


def _present(q: Question) -> PresentedQuestion:
    return PresentedQuestion(
        id=q.id,
        subject=q.subject,
        tier=q.tier,
        text=q.text,
        code_example=q.code_example,
        options=list(q.options),
        points=q.points,
        topic=q.topic,
        source=q.source,
    )


def _session_view(c: SessionCoordinator) -> SessionView:
    return SessionView(
        session_id=c.session_id,
        subject=c.preferences.subject,
        state=c.state.value,
        current_tier=c.current_tier,
        consecutive_correct=c.consecutive_correct,
        completion_checkpoint=c.completion_checkpoint,
        question=_present(c.current_question) if c.current_question else None,
        statistics=c.statistics.snapshot(),
        accuracy=round(c.statistics.accuracy, 1),
        summary=c.summary,
    )


def _evaluation_response(c: SessionCoordinator) -> EvaluationResponse:
    event = c.last_event
    return EvaluationResponse(
        session_id=c.session_id,
        question_id=event.question_id,
        submitted_index=event.submitted_index,
        skipped=event.skipped,
        correct_answer_index=c.current_question.correct_answer_index,
        evaluation=event.evaluation,
        statistics=event.statistics,
        tier_changed=event.tier_changed,
        new_tier=event.new_tier,
        completed=c.state is SessionState.COMPLETED,
        summary=c.summary if c.state is SessionState.COMPLETED else None,
    )


@router.get("/subjects", response_model=SubjectListResponse)
async def list_subjects(registry: Registry):
    """Subjects and tiers available in the question bank."""
    bank = registry.bank
    return SubjectListResponse(
        subjects=[
            SubjectInfo(
                subject=s,
                display_name=SUBJECT_DISPLAY_NAMES.get(s, s),
                tiers=bank.tiers(s),
            )
            for s in bank.subjects()
        ],
        default_subject=bank.default_subject,
    )


@router.post("/placement", response_model=PlacementResponse)
async def compute_placement(body: PlacementRequest):
    """Map a diagnostic assessment score to a skill label and starting tier."""
    placement = ProficiencyController.place(body.percentage)
    return PlacementResponse(**placement.model_dump())


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(body: SessionStartRequest, registry: Registry):
    """Start a practice session and present its first question."""
    coordinator = registry.create(
        SessionPreferences(
            subject=body.subject,
            initial_tier=body.initial_tier,
            topic_hint=body.topic_hint,
        )
    )
    try:
        await coordinator.request_question()
    except NoQuestionAvailable:
        registry.remove(coordinator.session_id)
        raise
    return _session_view(coordinator)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(coordinator: Coordinator):
    return _session_view(coordinator)


@router.post("/sessions/{session_id}/answer", response_model=EvaluationResponse)
async def submit_answer(body: AnswerRequest, coordinator: Coordinator):
    """Submit the selected option for the presented question."""
    try:
        coordinator.select_option(body.selected_index)
    except InvalidTransition:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    coordinator.submit()
    return _evaluation_response(coordinator)


@router.post("/sessions/{session_id}/skip", response_model=EvaluationResponse)
async def skip_question(coordinator: Coordinator):
    """Skip the presented question (scored as incorrect)."""
    coordinator.skip()
    return _evaluation_response(coordinator)


@router.post("/sessions/{session_id}/next", response_model=SessionView)
async def next_question(coordinator: Coordinator):
    """Fetch the next question after an evaluation."""
    await coordinator.request_question()
    return _session_view(coordinator)


@router.post("/sessions/{session_id}/continue", response_model=SessionView)
async def continue_session(coordinator: Coordinator, body: Optional[ContinueRequest] = None):
    """Keep practising after completion; statistics are retained."""
    extra = body.extra_questions if body else None
    await coordinator.continue_practice(extra)
    return _session_view(coordinator)


@router.get("/sessions/{session_id}/progress", response_model=ProgressHistoryResponse)
async def get_progress(session_id: str, coordinator: Coordinator, registry: Registry):
    """Progress events emitted so far for the session."""
    return ProgressHistoryResponse(
        session_id=coordinator.session_id,
        events=registry.progress.events_for(session_id),
    )


@router.delete("/sessions/{session_id}", response_model=AbandonResponse)
async def abandon_session(coordinator: Coordinator, registry: Registry):
    """Exit the session and drop it from memory."""
    coordinator.abandon()
    registry.remove(coordinator.session_id)
    return AbandonResponse(
        session_id=coordinator.session_id,
        state=coordinator.state.value,
        abandoned_at=datetime.now(timezone.utc),
    )
