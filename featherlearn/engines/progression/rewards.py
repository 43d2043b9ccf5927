"""
Reward Engine - XP / feather awards and level derivation.
"""

from pydantic import BaseModel

from featherlearn.engines.progression.scoring import round_half_up
from featherlearn.kernel.errors import InvalidPoints
from featherlearn.kernel.models.progress import ProgressStatus

DEFAULT_COMPLETION_THRESHOLD = 70
DEFAULT_XP_PER_LEVEL = 1000


class RewardOutcome(BaseModel):
    """What a scored attempt earns."""

    completed: bool
    status: ProgressStatus
    xp: int = 0
    feathers: int = 0


class RewardGrant(BaseModel):
    """Before/after view of a user's reward fields."""

    xp_awarded: int
    feathers_awarded: int
    old_xp: int
    new_xp: int
    old_feathers: int
    new_feathers: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


class RewardEngine:
    """
    Deterministic reward rules.

    A lesson counts as completed when its score reaches the threshold; the
    lesson's base XP and feathers are then scaled by score/100.
    """

    @classmethod
    def evaluate(
        cls,
        score: int,
        base_xp: int,
        base_feathers: int,
        threshold: int = DEFAULT_COMPLETION_THRESHOLD,
    ) -> RewardOutcome:
        if score < threshold:
            return RewardOutcome(completed=False, status=ProgressStatus.FAILED)
        return RewardOutcome(
            completed=True,
            status=ProgressStatus.COMPLETED,
            xp=round_half_up(base_xp * score, 100),
            feathers=round_half_up(base_feathers * score, 100),
        )

    @staticmethod
    def level_for_xp(xp: int, xp_per_level: int = DEFAULT_XP_PER_LEVEL) -> int:
        return xp // xp_per_level + 1

    @classmethod
    def grant(
        cls,
        current_xp: int,
        current_feathers: int,
        xp: int,
        feathers: int,
        xp_per_level: int = DEFAULT_XP_PER_LEVEL,
    ) -> RewardGrant:
        """
        Add XP and feathers to a balance and recompute the level.

        Raises:
            InvalidPoints: A negative amount was requested
        """
        if xp < 0:
            raise InvalidPoints(xp)
        if feathers < 0:
            raise InvalidPoints(feathers)

        new_xp = current_xp + xp
        return RewardGrant(
            xp_awarded=xp,
            feathers_awarded=feathers,
            old_xp=current_xp,
            new_xp=new_xp,
            old_feathers=current_feathers,
            new_feathers=current_feathers + feathers,
            old_level=cls.level_for_xp(current_xp, xp_per_level),
            new_level=cls.level_for_xp(new_xp, xp_per_level),
        )
