"""
Proficiency Controller - Tier promotion/demotion and assessment placement.
"""

from pydantic import BaseModel

from smart_tutor.engines.practice.types import ProficiencyTier, SkillLabel


class Placement(BaseModel):
    """Result of the diagnostic placement assessment."""

    label: SkillLabel
    description: str
    initial_tier: ProficiencyTier
    assessment_score: float


# Display label -> bank tier used to start practice
LABEL_TIERS = {
    SkillLabel.BEGINNER: ProficiencyTier.BASIC,
    SkillLabel.INTERMEDIATE: ProficiencyTier.INTERMEDIATE,
    SkillLabel.ADVANCED: ProficiencyTier.ADVANCED,
}


class ProficiencyController:
    """
    Maps (tier, running accuracy, streak) to the next tier.

    Rules, first match wins:
    - Promote one tier: accuracy > 85% and at least 3 correct in a row
    - Demote one tier: accuracy < 50%
    - Otherwise unchanged

    The streak passed in includes the answer just scored; callers reset it
    to 0 on any incorrect or skipped answer.
    """

    PROMOTION_ACCURACY = 85.0
    PROMOTION_STREAK = 3
    DEMOTION_ACCURACY = 50.0

    # Placement thresholds (assessment percentage)
    PLACEMENT_ADVANCED = 85.0
    PLACEMENT_INTERMEDIATE = 65.0
    PLACEMENT_BEGINNER = 40.0

    @classmethod
    def next_tier(
        cls,
        current_tier: ProficiencyTier,
        running_accuracy_percent: float,
        consecutive_correct: int,
    ) -> ProficiencyTier:
        current_tier = ProficiencyTier(current_tier)

        higher = current_tier.step_up()
        if (
            running_accuracy_percent > cls.PROMOTION_ACCURACY
            and consecutive_correct >= cls.PROMOTION_STREAK
            and higher is not None
        ):
            return higher

        lower = current_tier.step_down()
        if running_accuracy_percent < cls.DEMOTION_ACCURACY and lower is not None:
            return lower

        return current_tier

    @classmethod
    def place(cls, percentage: float) -> Placement:
        """Derive a skill label and starting tier from a diagnostic assessment score."""
        if not 0 <= percentage <= 100:
            raise ValueError(f"Assessment percentage must be within 0..100, got {percentage}")

        if percentage >= cls.PLACEMENT_ADVANCED:
            label = SkillLabel.ADVANCED
            description = "Excellent! You have strong programming fundamentals."
        elif percentage >= cls.PLACEMENT_INTERMEDIATE:
            label = SkillLabel.INTERMEDIATE
            description = "Good job! You have solid basic knowledge."
        elif percentage >= cls.PLACEMENT_BEGINNER:
            label = SkillLabel.BEGINNER
            description = "Great start! We'll help you build strong foundations."
        else:
            label = SkillLabel.BEGINNER
            description = "No worries! Everyone starts somewhere. Let's learn together."

        return Placement(
            label=label,
            description=description,
            initial_tier=LABEL_TIERS[label],
            assessment_score=percentage,
        )
