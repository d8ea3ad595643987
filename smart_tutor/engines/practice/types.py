"""
Shared practice types - breaks circular imports between the bank, evaluator and controller.
"""

from enum import Enum
from typing import Optional


class ProficiencyTier(str, Enum):
    """Bank-selection tiers, ordered basic < intermediate < advanced."""
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)

    def step_up(self) -> Optional["ProficiencyTier"]:
        """Next tier up, or None at the top."""
        if self.rank + 1 < len(TIER_ORDER):
            return TIER_ORDER[self.rank + 1]
        return None

    def step_down(self) -> Optional["ProficiencyTier"]:
        """Next tier down, or None at the bottom."""
        if self.rank > 0:
            return TIER_ORDER[self.rank - 1]
        return None


TIER_ORDER = [ProficiencyTier.BASIC, ProficiencyTier.INTERMEDIATE, ProficiencyTier.ADVANCED]

# Base points per tier, used by the bank and requested from the generator
TIER_POINTS = {
    ProficiencyTier.BASIC: 10,
    ProficiencyTier.INTERMEDIATE: 20,
    ProficiencyTier.ADVANCED: 30,
}


class Rating(str, Enum):
    """Qualitative rating attached to an evaluated answer."""
    EXCELLENT = "excellent"  # Correct in under 30s
    GOOD = "good"            # Correct in under 60s
    AVERAGE = "average"      # Correct, slower
    POOR = "poor"            # Incorrect or skipped


class SkillLabel(str, Enum):
    """Display level derived from the diagnostic assessment (not a bank tier)."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class QuestionSource(str, Enum):
    """Where a served question came from."""
    BANK = "bank"
    GENERATED = "generated"


SUBJECT_DISPLAY_NAMES = {
    "cpp": "C++",
    "java": "Java",
    "python": "Python",
}
