"""Unit tests for QuestionBank: partitions, default fallback, JSON loading."""

import json

import pytest

from smart_tutor.engines.practice.exceptions import NoQuestionAvailable
from smart_tutor.engines.practice.question_bank import Question, QuestionBank
from smart_tutor.engines.practice.types import TIER_POINTS, ProficiencyTier, QuestionSource


class TestBuiltInPools:

    def test_every_subject_has_every_tier(self, bank):
        assert set(bank.subjects()) == {"cpp", "java", "python"}
        for subject in bank.subjects():
            assert bank.tiers(subject) == list(ProficiencyTier)

    def test_questions_are_well_formed(self, bank):
        seen = set()
        for subject in bank.subjects():
            for tier in bank.tiers(subject):
                for q in bank.fetch(subject, tier):
                    assert q.subject == subject
                    assert q.tier == tier
                    assert q.points == TIER_POINTS[tier]
                    assert 0 <= q.correct_answer_index < len(q.options)
                    assert q.source == QuestionSource.BANK
                    assert q.id not in seen
                    seen.add(q.id)


class TestFetch:

    def test_returns_partition(self, small_bank):
        pool = small_bank.fetch("cpp", ProficiencyTier.INTERMEDIATE)
        assert [q.id for q in pool] == ["i1", "i2"]

    def test_accepts_tier_string(self, small_bank):
        assert len(small_bank.fetch("cpp", "basic")) == 3

    def test_returns_copy(self, small_bank):
        pool = small_bank.fetch("cpp", ProficiencyTier.BASIC)
        pool.clear()
        assert len(small_bank.fetch("cpp", ProficiencyTier.BASIC)) == 3

    def test_unknown_subject_falls_back_to_default(self, small_bank):
        pool = small_bank.fetch("rust", ProficiencyTier.ADVANCED)
        assert [q.id for q in pool] == ["b1", "b2", "b3"]

    def test_missing_tier_falls_back_to_default(self, small_bank):
        pool = small_bank.fetch("python", ProficiencyTier.ADVANCED)
        assert pool[0].subject == "cpp"

    def test_empty_bank_raises(self):
        with pytest.raises(NoQuestionAvailable) as exc_info:
            QuestionBank(pools={}).fetch("cpp", ProficiencyTier.BASIC)
        assert exc_info.value.subject == "cpp"
        assert isinstance(exc_info.value, LookupError)

    def test_supports(self, small_bank):
        assert small_bank.supports("python")
        assert not small_bank.supports("rust")


class TestQuestionModel:

    def test_rejects_out_of_range_index(self):
        with pytest.raises(ValueError):
            Question(
                id="x", subject="cpp", tier=ProficiencyTier.BASIC, text="?",
                options=["A", "B"], correct_answer_index=2, explanation="", points=10,
            )

    def test_rejects_single_option(self):
        with pytest.raises(ValueError):
            Question(
                id="x", subject="cpp", tier=ProficiencyTier.BASIC, text="?",
                options=["A"], correct_answer_index=0, explanation="", points=10,
            )


class TestFromJson:

    def test_loads_and_skips_invalid_entries(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps({
            "go": {
                "basic": [
                    {
                        "id": "go_1",
                        "question": "Which keyword declares a function in Go?",
                        "options": ["fn", "func", "def", "function"],
                        "correctAnswer": 1,
                        "explanation": "Go uses func.",
                        "codeExample": "func main() {}",
                    },
                    {"id": "go_bad", "question": "?", "options": ["A", "B"], "correctAnswer": 7},
                ],
                "expert": [{"id": "ignored"}],
            }
        }))
        bank = QuestionBank.from_json(path, default_subject="go")
        pool = bank.fetch("go", ProficiencyTier.BASIC)
        assert [q.id for q in pool] == ["go_1"]
        assert pool[0].correct_answer_index == 1
        assert pool[0].code_example == "func main() {}"
        assert bank.subjects() == ["go"]

    def test_missing_file_gives_empty_bank(self, tmp_path):
        bank = QuestionBank.from_json(tmp_path / "missing.json")
        with pytest.raises(NoQuestionAvailable):
            bank.fetch("cpp", ProficiencyTier.BASIC)
