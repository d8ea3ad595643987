"""Unit tests for QuestionProvider: generation first, bank fallback, anti-repetition."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from smart_tutor.ai.question_generator import GenerationFailure, GenerationResult
from smart_tutor.engines.practice.evaluator import AnswerEvaluator
from smart_tutor.engines.practice.exceptions import NoQuestionAvailable
from smart_tutor.engines.practice.question_bank import QuestionBank
from smart_tutor.engines.practice.question_provider import QuestionProvider, UsedQuestionSet
from smart_tutor.engines.practice.types import ProficiencyTier, QuestionSource

BASIC = ProficiencyTier.BASIC


def _generator(result: GenerationResult, configured: bool = True) -> MagicMock:
    gen = MagicMock()
    gen.configured = configured
    gen.generate = AsyncMock(return_value=result)
    return gen


class TestBankFallback:

    def test_draws_without_repeating_until_exhausted(self, small_bank):
        provider = QuestionProvider(small_bank, rng=random.Random(7))
        for _ in range(3):
            provider.draw_from_bank("cpp", BASIC)
        assert {key[2] for key in provider.used_questions} == {"b1", "b2", "b3"}

    def test_used_set_resets_on_the_draw_after_exhaustion(self, small_bank):
        provider = QuestionProvider(small_bank, rng=random.Random(1))
        for _ in range(3):
            provider.draw_from_bank("cpp", BASIC)
        assert len(provider.used_questions) == 3

        provider.draw_from_bank("cpp", BASIC)
        assert len(provider.used_questions) == 1

    def test_pigeonhole_over_many_draws(self, bank):
        provider = QuestionProvider(bank, rng=random.Random(42))
        pool_size = len(bank.fetch("cpp", BASIC))
        for _ in range(5):
            ids = [provider.draw_from_bank("cpp", BASIC).id.rsplit("_", 2)[0] for _ in range(pool_size)]
            assert len(set(ids)) == pool_size

    def test_served_instance_ids_are_unique(self, small_bank):
        provider = QuestionProvider(small_bank, clock=lambda: 1_700_000_000.0)
        ids = {provider.draw_from_bank("cpp", BASIC).id for _ in range(6)}
        assert len(ids) == 6
        assert all(i.startswith("cpp_basic_") for i in ids)

    def test_served_copy_carries_timestamp(self, small_bank):
        provider = QuestionProvider(small_bank, clock=lambda: 1_700_000_000.0)
        q = provider.draw_from_bank("cpp", BASIC)
        assert q.generated_at.timestamp() == 1_700_000_000.0
        assert q.source == QuestionSource.BANK

    def test_unknown_subject_uses_default_partition(self, small_bank):
        provider = QuestionProvider(small_bank)
        q = provider.draw_from_bank("haskell", BASIC)
        assert q.subject == "cpp"

    def test_empty_bank_raises(self):
        provider = QuestionProvider(QuestionBank(pools={}))
        with pytest.raises(NoQuestionAvailable):
            provider.draw_from_bank("cpp", BASIC)

    def test_partitions_tracked_separately(self, small_bank):
        provider = QuestionProvider(small_bank)
        provider.draw_from_bank("cpp", BASIC)
        provider.draw_from_bank("cpp", ProficiencyTier.INTERMEDIATE)
        tiers = {key[1] for key in provider.used_questions}
        assert tiers == {BASIC, ProficiencyTier.INTERMEDIATE}

    def test_separate_providers_do_not_share_used_set(self, small_bank):
        a = QuestionProvider(small_bank)
        b = QuestionProvider(small_bank)
        a.draw_from_bank("cpp", BASIC)
        assert len(a.used_questions) == 1
        assert len(b.used_questions) == 0


class TestNext:

    @pytest.mark.asyncio
    async def test_generated_question_is_returned(self, small_bank, question_factory):
        generated = question_factory("gen_1").model_copy(update={"source": QuestionSource.GENERATED})
        gen = _generator(GenerationResult.success(generated))
        provider = QuestionProvider(small_bank, generator=gen)

        q = await provider.next("cpp", BASIC, "pointers")

        assert q is generated
        gen.generate.assert_awaited_once_with("cpp", BASIC, "pointers")
        assert len(provider.used_questions) == 0

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_bank(self, small_bank):
        gen = _generator(GenerationResult.failed(GenerationFailure.TIMEOUT))
        provider = QuestionProvider(small_bank, generator=gen)

        q = await provider.next("cpp", BASIC)

        assert q.source == QuestionSource.BANK
        assert len(provider.used_questions) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_generator_not_called(self, small_bank):
        gen = _generator(GenerationResult.failed(GenerationFailure.NOT_CONFIGURED), configured=False)
        provider = QuestionProvider(small_bank, generator=gen)

        await provider.next("cpp", BASIC)

        gen.generate.assert_not_awaited()
        assert provider.generation_enabled is False

    @pytest.mark.asyncio
    async def test_no_generator(self, small_bank):
        provider = QuestionProvider(small_bank)
        q = await provider.next("python", "basic")
        assert q.subject == "python"


def test_used_key_normalises_tier():
    used = UsedQuestionSet()
    used.add(UsedQuestionSet.key("cpp", "basic", "b1"))
    assert UsedQuestionSet.key("cpp", BASIC, "b1") in used
    assert len(used) == 1
    used.clear()
    assert len(used) == 0


def test_served_questions_score_correct_with_their_own_index(bank):
    provider = QuestionProvider(bank, rng=random.Random(5))
    for subject in bank.subjects():
        for tier in bank.tiers(subject):
            q = provider.draw_from_bank(subject, tier)
            assert AnswerEvaluator.evaluate(q, q.correct_answer_index, 1_000).is_correct


def test_served_question_cannot_alter_the_shared_bank(bank):
    provider = QuestionProvider(bank, rng=random.Random(2))
    q = provider.draw_from_bank("cpp", BASIC)

    assert isinstance(q.options, tuple)
    with pytest.raises(AttributeError):
        q.options.append("Injected")

    for entry in QuestionBank().fetch("cpp", BASIC):
        assert "Injected" not in entry.options
