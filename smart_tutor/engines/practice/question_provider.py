"""
Question Provider - One question per request: remote generation first, local bank second.
"""

import itertools
import random
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, FrozenSet, Iterator, Optional, Set, Tuple

from smart_tutor.engines.practice.question_bank import Question, QuestionBank
from smart_tutor.engines.practice.types import ProficiencyTier
from smart_tutor.logging_config import get_logger

if TYPE_CHECKING:
    from smart_tutor.ai.question_generator import QuestionGenerator

logger = get_logger(__name__)

UsedKey = Tuple[str, ProficiencyTier, str]


class UsedQuestionSet:
    """(subject, tier, bank id) keys already served by the fallback path."""

    def __init__(self) -> None:
        self._keys: Set[UsedKey] = set()

    @staticmethod
    def key(subject: str, tier: ProficiencyTier, question_id: str) -> UsedKey:
        return (subject, ProficiencyTier(tier), question_id)

    def add(self, key: UsedKey) -> None:
        self._keys.add(key)

    def clear(self) -> None:
        self._keys.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[UsedKey]:
        return iter(self._keys)


class QuestionProvider:
    """
    Produces questions for one practice session.

    Stage 1 asks the generator (when one is configured) and returns its
    question if it validated. Stage 2 always succeeds from the bank: unused
    candidates are preferred, and the used set is cleared once every question
    in the partition has been served.

    Each session owns its own provider, so the used set is never shared.
    """

    def __init__(
        self,
        bank: QuestionBank,
        generator: Optional["QuestionGenerator"] = None,
        used: Optional[UsedQuestionSet] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._bank = bank
        self._generator = generator
        self._used = used if used is not None else UsedQuestionSet()
        self._rng = rng or random.Random()
        self._clock = clock
        self._sequence = itertools.count(1)

    @property
    def used_questions(self) -> FrozenSet[UsedKey]:
        return frozenset(self._used)

    @property
    def generation_enabled(self) -> bool:
        return self._generator is not None and self._generator.configured

    async def next(
        self,
        subject: str,
        tier: ProficiencyTier,
        topic_hint: Optional[str] = None,
    ) -> Question:
        """
        Return one question for (subject, tier).

        Generation failures never propagate; only NoQuestionAvailable can be
        raised, when the bank has neither the partition nor a default.
        """
        tier = ProficiencyTier(tier)
        if self.generation_enabled:
            result = await self._generator.generate(subject, tier, topic_hint)
            if result.ok:
                return result.question
            logger.info(
                "Falling back to question bank",
                extra={
                    "subject": subject,
                    "tier": tier.value,
                    "reason": result.failure.value if result.failure else None,
                },
            )
        return self.draw_from_bank(subject, tier)

    def draw_from_bank(self, subject: str, tier: ProficiencyTier) -> Question:
        """Select an unused bank question uniformly at random and record it."""
        tier = ProficiencyTier(tier)
        pool = self._bank.fetch(subject, tier)

        candidates = [q for q in pool if UsedQuestionSet.key(subject, tier, q.id) not in self._used]
        if not candidates:
            logger.debug("All %d questions used for %s/%s; resetting", len(pool), subject, tier.value)
            self._used.clear()
            candidates = pool

        selected = self._rng.choice(candidates)
        self._used.add(UsedQuestionSet.key(subject, tier, selected.id))

        now = self._clock()
        served_at = datetime.fromtimestamp(now, tz=timezone.utc)
        instance_id = f"{subject}_{tier.value}_{selected.id}_{int(now * 1000)}_{next(self._sequence)}"
        return selected.model_copy(update={"id": instance_id, "generated_at": served_at})
