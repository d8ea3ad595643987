"""Quick script to verify the OpenAI API key is loaded and can generate a question."""
import asyncio
import sys

from smart_tutor.ai.question_generator import QuestionGenerator
from smart_tutor.config import get_settings
from smart_tutor.engines.practice.types import ProficiencyTier


def main():
    s = get_settings()
    k = s.openai_api_key.strip()
    print(f"Key length: {len(k)}")
    print(f"Starts with sk-: {k.startswith('sk-')}")
    print(f"Is placeholder: {k.startswith('sk-your-')}")
    if not s.generation_configured:
        print("FAIL: OPENAI_API_KEY is missing or still the placeholder. Questions will come from the local bank.")
        sys.exit(1)
    print(f"First 8 chars: {k[:8]}...")
    print(f"Model: {s.openai_model} (timeout {s.generation_timeout_seconds}s)")

    gen = QuestionGenerator.from_settings(s)
    result = asyncio.run(gen.generate(s.default_subject, ProficiencyTier.BASIC))
    if not result.ok:
        print(f"FAIL: {result.failure.value} - {result.detail}")
        sys.exit(1)

    q = result.question
    print(f"OK: generated {q.id}")
    print(f"  {q.text}")
    for i, opt in enumerate(q.options):
        marker = "*" if i == q.correct_answer_index else " "
        print(f"  {marker} {i}. {opt}")


if __name__ == "__main__":
    main()
