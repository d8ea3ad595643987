"""
Question Generator -- asks an OpenAI-compatible chat model for one
multiple-choice programming question and validates the reply.

The model output is untrusted: the JSON object is extracted from the free-text
reply and schema-validated before it becomes a Question.  Every failure
(no key, timeout, transport error, empty or malformed reply) is reported as a
GenerationResult with a failure reason instead of an exception, so callers can
branch to the local bank explicitly.

Pipeline position:  QuestionProvider.next() → generate() → (Question | fallback)
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from smart_tutor.config import Settings, get_settings
from smart_tutor.engines.practice.question_bank import Question
from smart_tutor.engines.practice.types import (
    SUBJECT_DISPLAY_NAMES,
    TIER_POINTS,
    ProficiencyTier,
    QuestionSource,
)

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


# ── Data structures ──────────────────────────────────────────────────

class GenerationFailure(str, Enum):
    """Why a generation attempt produced no question."""
    NOT_CONFIGURED = "not_configured"  # No API key (or placeholder key)
    TIMEOUT = "timeout"
    TRANSPORT = "transport"            # Connection error or non-success status
    EMPTY_RESPONSE = "empty_response"
    UNPARSABLE = "unparsable"          # No JSON object or schema mismatch


class GeneratedQuestionPayload(BaseModel):
    """Schema of the JSON object the model is asked to return."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    question: str = Field(min_length=1)
    options: Tuple[str, ...] = Field(min_length=2)
    correct_answer: int = Field(alias="correctAnswer")
    explanation: str = ""
    code_example: Optional[str] = Field(default=None, alias="codeExample")
    topic: Optional[str] = None
    points: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_correct_answer(self) -> "GeneratedQuestionPayload":
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError("correctAnswer does not index into options")
        return self


@dataclass
class GenerationResult:
    """Either a validated question or the reason there is none."""
    question: Optional[Question] = None
    failure: Optional[GenerationFailure] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.question is not None

    @classmethod
    def success(cls, question: Question) -> "GenerationResult":
        return cls(question=question)

    @classmethod
    def failed(cls, failure: GenerationFailure, detail: str = "") -> "GenerationResult":
        return cls(failure=failure, detail=detail)


LEVEL_DESCRIPTIONS = {
    ProficiencyTier.BASIC: "beginner level with fundamental concepts",
    ProficiencyTier.INTERMEDIATE: "intermediate level with practical applications",
    ProficiencyTier.ADVANCED: "advanced level with complex problem-solving",
}

_SYSTEM_PROMPT = (
    "You are an expert programming instructor. Generate educational programming "
    "questions with clear explanations."
)

_PROMPT_TEMPLATE = """\
Generate a {level_description} {language} programming question{topic_focus}.

Return the response in this exact JSON format:
{{
  "question": "Clear question statement",
  "options": ["Option A", "Option B", "Option C", "Option D"],
  "correctAnswer": 0,
  "explanation": "Detailed explanation of the correct answer",
  "codeExample": "Optional code snippet if applicable",
  "difficulty": "{tier}",
  "topic": "specific topic name",
  "points": {points}
}}

Make the question educational, practical, and appropriate for the specified level."""


class QuestionGenerator:
    """Remote question generation with a bounded, never-raising call."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout_seconds: float = 15.0,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        client: Any = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QuestionGenerator":
        settings = settings or get_settings()
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.generation_timeout_seconds,
            max_tokens=settings.generation_max_tokens,
            temperature=settings.generation_temperature,
        )

    @property
    def configured(self) -> bool:
        """A usable credential (or an injected client) is present."""
        if self._client is not None:
            return True
        return bool(self.api_key) and not self.api_key.startswith("sk-your-")

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def build_prompt(
        self,
        subject: str,
        tier: ProficiencyTier,
        topic_hint: Optional[str] = None,
    ) -> str:
        """Build the user prompt for one question."""
        tier = ProficiencyTier(tier)
        return _PROMPT_TEMPLATE.format(
            level_description=LEVEL_DESCRIPTIONS[tier],
            language=SUBJECT_DISPLAY_NAMES.get(subject, subject),
            topic_focus=f" focusing on {topic_hint}" if topic_hint else "",
            tier=tier.value,
            points=TIER_POINTS[tier],
        )

    async def generate(
        self,
        subject: str,
        tier: ProficiencyTier,
        topic_hint: Optional[str] = None,
    ) -> GenerationResult:
        """
        Request one question from the model.

        Args:
            subject: Subject tag (cpp, java, python)
            tier: Proficiency tier to target
            topic_hint: Optional topic to focus on

        Returns:
            GenerationResult holding a Question, or the failure reason
        """
        tier = ProficiencyTier(tier)
        if not self.configured:
            return GenerationResult.failed(GenerationFailure.NOT_CONFIGURED, "no API key")

        client = self._get_client()
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": _SYSTEM_PROMPT},
                        {"role": "user", "content": self.build_prompt(subject, tier, topic_hint)},
                    ],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Question generation timed out after %.1fs (%s/%s)",
                self.timeout_seconds, subject, tier.value,
            )
            return GenerationResult.failed(GenerationFailure.TIMEOUT, f"timeout after {self.timeout_seconds}s")
        except Exception as exc:
            logger.warning("Question generation request failed: %s", exc)
            return GenerationResult.failed(GenerationFailure.TRANSPORT, str(exc))

        try:
            content = (response.choices[0].message.content or "").strip()
        except (AttributeError, IndexError, TypeError):
            content = ""
        if not content:
            logger.warning("Question generation returned an empty reply (%s/%s)", subject, tier.value)
            return GenerationResult.failed(GenerationFailure.EMPTY_RESPONSE, "empty reply")

        result = self.parse_response(content, subject, tier)
        if result.ok:
            logger.info(
                "Generated %s/%s question in %d ms",
                subject, tier.value, int((time.perf_counter() - start) * 1000),
            )
        return result

    def parse_response(
        self,
        content: str,
        subject: str,
        tier: ProficiencyTier,
    ) -> GenerationResult:
        """Extract and validate the JSON object in a model reply."""
        tier = ProficiencyTier(tier)
        match = _JSON_OBJECT_RE.search(content or "")
        if not match:
            logger.warning("Generated reply contained no JSON object (%s/%s)", subject, tier.value)
            return GenerationResult.failed(GenerationFailure.UNPARSABLE, "no JSON object in reply")

        try:
            data = json.loads(match.group(0))
            payload = GeneratedQuestionPayload.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Generated question failed validation (%s/%s): %s", subject, tier.value, exc)
            return GenerationResult.failed(GenerationFailure.UNPARSABLE, str(exc))

        now = datetime.now(timezone.utc)
        question = Question(
            id=f"{subject}_{tier.value}_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:6]}",
            subject=subject,
            tier=tier,
            text=payload.question,
            code_example=payload.code_example or None,
            options=payload.options,
            correct_answer_index=payload.correct_answer,
            explanation=payload.explanation,
            points=payload.points or TIER_POINTS[tier],
            topic=payload.topic,
            source=QuestionSource.GENERATED,
            generated_at=now,
        )
        return GenerationResult.success(question)
