"""
Pytest fixtures for Smart Tutor tests.
"""

import os
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Never reach a real model from tests
os.environ["OPENAI_API_KEY"] = ""

from smart_tutor.config import get_settings  # noqa: E402

get_settings.cache_clear()

from smart_tutor.engines.practice.question_bank import Question, QuestionBank  # noqa: E402
from smart_tutor.engines.practice.types import TIER_POINTS, ProficiencyTier  # noqa: E402


def make_question(
    qid: str,
    subject: str = "cpp",
    tier: ProficiencyTier = ProficiencyTier.BASIC,
    correct: int = 0,
    points: Optional[int] = None,
    options: Optional[List[str]] = None,
) -> Question:
    """Small valid question for tests."""
    return Question(
        id=qid,
        subject=subject,
        tier=tier,
        text=f"Question {qid}?",
        options=options or ["A", "B", "C", "D"],
        correct_answer_index=correct,
        explanation=f"Because {qid}.",
        points=points or TIER_POINTS[tier],
        topic="Testing",
    )


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def bank() -> QuestionBank:
    """Bank with the built-in pools."""
    return QuestionBank()


@pytest.fixture
def small_pools() -> Dict[str, Dict[ProficiencyTier, List[Question]]]:
    return {
        "cpp": {
            ProficiencyTier.BASIC: [
                make_question("b1", correct=0),
                make_question("b2", correct=1),
                make_question("b3", correct=2),
            ],
            ProficiencyTier.INTERMEDIATE: [
                make_question("i1", tier=ProficiencyTier.INTERMEDIATE, correct=1),
                make_question("i2", tier=ProficiencyTier.INTERMEDIATE, correct=3),
            ],
            ProficiencyTier.ADVANCED: [
                make_question("a1", tier=ProficiencyTier.ADVANCED, correct=2),
            ],
        },
        "python": {
            ProficiencyTier.BASIC: [
                make_question("p1", subject="python", correct=3),
            ],
        },
    }


@pytest.fixture
def small_bank(small_pools) -> QuestionBank:
    return QuestionBank(pools=small_pools)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_completion(content: Optional[str]) -> SimpleNamespace:
    """Shape of an OpenAI chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.fixture
def fake_openai_client():
    """Factory for a mocked AsyncOpenAI client returning the given reply text."""

    def _make(content: Optional[str] = None, side_effect=None) -> MagicMock:
        client = MagicMock()
        if side_effect is not None:
            client.chat.completions.create = AsyncMock(side_effect=side_effect)
        else:
            client.chat.completions.create = AsyncMock(return_value=make_completion(content))
        return client

    return _make


@pytest.fixture
def generated_reply() -> str:
    """Typical model reply: prose around a JSON object."""
    return (
        "Sure! Here is your question:\n"
        "{\n"
        '  "question": "What does the len() function return for an empty list?",\n'
        '  "options": ["None", "0", "-1", "An error"],\n'
        '  "correctAnswer": 1,\n'
        '  "explanation": "len() of an empty list is 0.",\n'
        '  "codeExample": "print(len([]))",\n'
        '  "difficulty": "basic",\n'
        '  "topic": "Built-ins"\n'
        "}\n"
        "Good luck!"
    )


@pytest.fixture
def question_factory():
    return make_question
