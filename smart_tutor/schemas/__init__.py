"""
Pydantic schemas for API request/response validation.
"""

from smart_tutor.schemas.common import ErrorResponse, HealthResponse
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

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "AbandonResponse",
    "AnswerRequest",
    "ContinueRequest",
    "EvaluationResponse",
    "PlacementRequest",
    "PlacementResponse",
    "PresentedQuestion",
    "ProgressHistoryResponse",
    "SessionStartRequest",
    "SessionView",
    "SubjectInfo",
    "SubjectListResponse",
]
