"""
Practice engine errors.

Generation failures are never raised; they are absorbed by the question provider.
"""


class InvalidQuestion(ValueError):
    """A question violates its contract (e.g. correct index out of range)."""


class NoQuestionAvailable(LookupError):
    """Neither the requested partition nor the default partition has questions."""

    def __init__(self, subject: str, tier: str):
        self.subject = subject
        self.tier = tier
        super().__init__(
            f"No questions available for subject '{subject}' at tier '{tier}' "
            "and no default partition is configured"
        )
