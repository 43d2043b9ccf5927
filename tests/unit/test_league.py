"""Unit tests for the league ladder and point transitions."""

import pytest

from featherlearn.engines.progression.league import (
    DEFAULT_LADDER,
    LeagueLadder,
    TierSpec,
    add_points,
    check_overlap,
    ranking_key,
    validate_ladder,
)
from featherlearn.kernel.errors import InvalidPoints, OverlappingLeagueRange, ValidationError


@pytest.fixture
def ladder() -> LeagueLadder:
    return LeagueLadder.default()


class TestLadder:

    @pytest.mark.parametrize(
        "points,name",
        [(0, "Bronze"), (999, "Bronze"), (1000, "Silver"), (2499, "Silver"),
         (2500, "Gold"), (19999, "Diamond"), (20000, "Master"), (10 ** 6, "Master")],
    )
    def test_tier_for(self, ladder, points, name):
        assert ladder.tier_for(points).name == name

    def test_lowest_and_next(self, ladder):
        assert ladder.lowest.name == "Bronze"
        assert ladder.next_tier("Bronze").name == "Silver"
        assert ladder.next_tier("Master") is None
        assert ladder.next_tier("Unknown") is None

    def test_progress_to_next(self, ladder):
        assert ladder.progress_to_next(0) == 0
        assert ladder.progress_to_next(500) == 50
        assert ladder.progress_to_next(1750) == 50
        assert ladder.progress_to_next(25000) == 100

    def test_default_ladder_is_valid(self):
        validate_ladder(DEFAULT_LADDER)

    def test_empty_ladder_rejected(self):
        with pytest.raises(ValidationError):
            LeagueLadder([])


class TestValidateLadder:

    def test_overlap(self):
        tiers = [
            TierSpec(name="A", level=1, min_points=0, max_points=100),
            TierSpec(name="B", level=2, min_points=50, max_points=200),
        ]
        with pytest.raises(OverlappingLeagueRange) as exc_info:
            validate_ladder(tiers)
        assert exc_info.value.status_code == 409

    def test_open_ended_tier_must_be_last(self):
        tiers = [
            TierSpec(name="A", level=1, min_points=0, max_points=None),
            TierSpec(name="B", level=2, min_points=100, max_points=None),
        ]
        with pytest.raises(OverlappingLeagueRange):
            validate_ladder(tiers)

    def test_gap(self):
        tiers = [
            TierSpec(name="A", level=1, min_points=0, max_points=100),
            TierSpec(name="B", level=2, min_points=150, max_points=None),
        ]
        with pytest.raises(ValidationError) as exc_info:
            validate_ladder(tiers)
        assert exc_info.value.code == "ladder_gap"

    def test_must_start_at_zero(self):
        with pytest.raises(ValidationError):
            validate_ladder([TierSpec(name="A", level=1, min_points=10)])

    def test_check_overlap_against_open_top_tier(self):
        with pytest.raises(OverlappingLeagueRange):
            check_overlap(TierSpec(name="Legend", level=7, min_points=30000), DEFAULT_LADDER)

    def test_check_overlap_accepts_adjacent_range(self):
        existing = [TierSpec(name="A", level=1, min_points=0, max_points=100)]
        check_overlap(TierSpec(name="B", level=2, min_points=100, max_points=200), existing)


class TestAddPoints:

    def test_stays_in_league(self, ladder):
        update = add_points(ladder, "Bronze", 100, 3, 50)
        assert update.new_points == 150
        assert update.new_league == "Bronze"
        assert update.promoted is False
        assert update.league_week == 4

    def test_promotion_resets_week(self, ladder):
        update = add_points(ladder, "Bronze", 990, 5, 20)
        assert update.new_points == 1010
        assert update.new_league == "Silver"
        assert update.promoted is True
        assert update.league_week == 1

    def test_multi_tier_jump(self, ladder):
        update = add_points(ladder, "Bronze", 0, 1, 6000)
        assert update.new_league == "Platinum"

    def test_zero_points(self, ladder):
        update = add_points(ladder, "Silver", 1200, 2, 0)
        assert update.new_points == 1200
        assert update.promoted is False

    def test_negative_points_rejected(self, ladder):
        with pytest.raises(InvalidPoints) as exc_info:
            add_points(ladder, "Bronze", 100, 1, -5)
        assert exc_info.value.code == "invalid_points"


def test_ranking_key_orders_by_points_then_xp():
    users = [("a", 100, 50), ("b", 200, 10), ("c", 100, 80)]
    ordered = sorted(users, key=lambda u: ranking_key(u[1], u[2]))
    assert [u[0] for u in ordered] == ["b", "c", "a"]
