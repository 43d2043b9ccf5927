"""
League Ledger - ladder lookup, point additions and promotion.
"""

from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from featherlearn.kernel.errors import InvalidPoints, OverlappingLeagueRange, ValidationError


class TierSpec(BaseModel):
    """One rung of the ladder covering [min_points, max_points)."""

    name: str
    level: int
    min_points: int
    max_points: Optional[int] = None
    description: str = ""
    weekly_xp_reward: int = 0
    weekly_feather_reward: int = 0
    promotion_xp_reward: int = 0
    promotion_feather_reward: int = 0

    def contains(self, points: int) -> bool:
        if points < self.min_points:
            return False
        return self.max_points is None or points < self.max_points


DEFAULT_LADDER: List[TierSpec] = [
    TierSpec(name="Bronze", level=1, min_points=0, max_points=1000,
             description="Start your journey here!",
             weekly_xp_reward=100, weekly_feather_reward=10,
             promotion_xp_reward=500, promotion_feather_reward=50),
    TierSpec(name="Silver", level=2, min_points=1000, max_points=2500,
             description="You're getting better!",
             weekly_xp_reward=250, weekly_feather_reward=25,
             promotion_xp_reward=1000, promotion_feather_reward=100),
    TierSpec(name="Gold", level=3, min_points=2500, max_points=5000,
             description="Excellent progress!",
             weekly_xp_reward=500, weekly_feather_reward=50,
             promotion_xp_reward=2000, promotion_feather_reward=200),
    TierSpec(name="Platinum", level=4, min_points=5000, max_points=10000,
             description="You're a serious learner!",
             weekly_xp_reward=1000, weekly_feather_reward=100,
             promotion_xp_reward=5000, promotion_feather_reward=500),
    TierSpec(name="Diamond", level=5, min_points=10000, max_points=20000,
             description="Elite level achieved!",
             weekly_xp_reward=2000, weekly_feather_reward=200,
             promotion_xp_reward=10000, promotion_feather_reward=1000),
    TierSpec(name="Master", level=6, min_points=20000, max_points=None,
             description="The ultimate achievement!",
             weekly_xp_reward=5000, weekly_feather_reward=500,
             promotion_xp_reward=25000, promotion_feather_reward=2500),
]


class PointsUpdate(BaseModel):
    old_league: str
    new_league: str
    old_points: int
    new_points: int
    points_gained: int
    promoted: bool
    league_week: int


class LeagueLadder:
    """
    Ordered, contiguous set of tiers.

    Accepts TierSpec objects or anything exposing the same attributes
    (LeagueTier rows).
    """

    def __init__(self, tiers: Sequence[Any]):
        specs = [t if isinstance(t, TierSpec) else TierSpec.model_validate(t, from_attributes=True)
                 for t in tiers]
        self.tiers: List[TierSpec] = sorted(specs, key=lambda t: t.min_points)
        if not self.tiers:
            raise ValidationError("League ladder is empty", code="empty_ladder")

    @classmethod
    def default(cls) -> "LeagueLadder":
        return cls(DEFAULT_LADDER)

    @property
    def lowest(self) -> TierSpec:
        return self.tiers[0]

    def tier_for(self, points: int) -> TierSpec:
        """Highest tier whose minimum is at or below ``points``."""
        match = self.tiers[0]
        for tier in self.tiers:
            if tier.min_points <= points:
                match = tier
            else:
                break
        return match

    def get(self, name: str) -> Optional[TierSpec]:
        for tier in self.tiers:
            if tier.name == name:
                return tier
        return None

    def next_tier(self, name: str) -> Optional[TierSpec]:
        for i, tier in enumerate(self.tiers):
            if tier.name == name:
                return self.tiers[i + 1] if i + 1 < len(self.tiers) else None
        return None

    def progress_to_next(self, points: int) -> int:
        """Percent (0-100) of the way from the current tier's floor to the next tier."""
        current = self.tier_for(points)
        following = self.next_tier(current.name)
        if following is None:
            return 100
        span = following.min_points - current.min_points
        done = points - current.min_points
        return max(0, min(100, (100 * done) // span))


def validate_ladder(tiers: Sequence[TierSpec]) -> None:
    """
    Check a ladder is ascending, contiguous and non-overlapping.

    Raises:
        OverlappingLeagueRange: Two tiers cover the same points
        ValidationError: A gap between tiers, a bad range, a non-lowest
            open-ended tier or a ladder not starting at 0
    """
    ordered = sorted(tiers, key=lambda t: t.min_points)
    if not ordered:
        raise ValidationError("League ladder is empty", code="empty_ladder")
    if ordered[0].min_points != 0:
        raise ValidationError("Lowest league must start at 0 points", code="ladder_gap")

    for current, following in zip(ordered, ordered[1:]):
        if current.max_points is None or current.max_points > following.min_points:
            raise OverlappingLeagueRange(following.name, current.name)
        if current.max_points < following.min_points:
            raise ValidationError(
                f"Gap between '{current.name}' and '{following.name}' "
                f"({current.max_points}-{following.min_points})",
                code="ladder_gap",
            )

    for tier in ordered:
        if tier.max_points is not None and tier.max_points <= tier.min_points:
            raise ValidationError(f"League '{tier.name}' has an empty range", code="invalid_range")


def check_overlap(new: TierSpec, existing: Sequence[TierSpec]) -> None:
    """Reject a tier whose range intersects any existing tier."""
    new_hi = new.max_points if new.max_points is not None else float("inf")
    for tier in existing:
        hi = tier.max_points if tier.max_points is not None else float("inf")
        if new.min_points < hi and tier.min_points < new_hi:
            raise OverlappingLeagueRange(new.name, tier.name)


def add_points(
    ladder: LeagueLadder,
    current_league: str,
    current_points: int,
    league_week: int,
    amount: int,
) -> PointsUpdate:
    """
    Add league points and re-place the user on the ladder.

    A change of tier resets the league week to 1; otherwise the week
    counter advances by one.

    Raises:
        InvalidPoints: ``amount`` is negative
    """
    if amount < 0:
        raise InvalidPoints(amount)

    new_points = current_points + amount
    new_league = ladder.tier_for(new_points).name
    promoted = new_league != current_league

    return PointsUpdate(
        old_league=current_league,
        new_league=new_league,
        old_points=current_points,
        new_points=new_points,
        points_gained=amount,
        promoted=promoted,
        league_week=1 if promoted else league_week + 1,
    )


def ranking_key(league_points: int, xp: int) -> tuple[int, int]:
    """Sort key for leaderboards: more league points first, then more XP."""
    return (-league_points, -xp)
