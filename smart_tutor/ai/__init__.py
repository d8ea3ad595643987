"""
AI Isolation Zone - remote question generation.

Model output never reaches a session without schema validation, and
generation failures are returned as results, never raised.
"""

from smart_tutor.ai.question_generator import (
    GeneratedQuestionPayload,
    GenerationFailure,
    GenerationResult,
    QuestionGenerator,
)

__all__ = [
    "GeneratedQuestionPayload",
    "GenerationFailure",
    "GenerationResult",
    "QuestionGenerator",
]
