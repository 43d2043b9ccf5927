"""Unit tests for reward evaluation and level derivation."""

import pytest

from featherlearn.engines.progression.rewards import RewardEngine
from featherlearn.kernel.errors import InvalidPoints
from featherlearn.kernel.models.progress import ProgressStatus


class TestEvaluate:

    def test_completed_rewards_scale_with_score(self):
        outcome = RewardEngine.evaluate(75, base_xp=50, base_feathers=5)
        assert outcome.completed is True
        assert outcome.status == ProgressStatus.COMPLETED
        assert outcome.xp == 38
        assert outcome.feathers == 4

    def test_perfect_score_pays_full_reward(self):
        outcome = RewardEngine.evaluate(100, base_xp=50, base_feathers=5)
        assert (outcome.xp, outcome.feathers) == (50, 5)

    def test_threshold_is_inclusive(self):
        assert RewardEngine.evaluate(70, 50, 5).completed is True
        assert RewardEngine.evaluate(69, 50, 5).completed is False

    def test_failed_attempt_earns_nothing(self):
        outcome = RewardEngine.evaluate(50, base_xp=50, base_feathers=5)
        assert outcome.completed is False
        assert outcome.status == ProgressStatus.FAILED
        assert (outcome.xp, outcome.feathers) == (0, 0)

    def test_custom_threshold(self):
        assert RewardEngine.evaluate(60, 50, 5, threshold=60).completed is True


class TestLevels:

    @pytest.mark.parametrize("xp,level", [(0, 1), (999, 1), (1000, 2), (2500, 3)])
    def test_level_for_xp(self, xp, level):
        assert RewardEngine.level_for_xp(xp) == level

    def test_level_for_xp_custom_step(self):
        assert RewardEngine.level_for_xp(250, xp_per_level=100) == 3


class TestGrant:

    def test_grant_adds_and_levels_up(self):
        grant = RewardEngine.grant(990, 10, 50, 5)
        assert grant.new_xp == 1040
        assert grant.new_feathers == 15
        assert grant.old_level == 1
        assert grant.new_level == 2
        assert grant.leveled_up is True

    def test_grant_without_level_change(self):
        grant = RewardEngine.grant(0, 0, 38, 4)
        assert grant.new_level == 1
        assert grant.leveled_up is False

    def test_zero_grant_is_allowed(self):
        grant = RewardEngine.grant(10, 1, 0, 0)
        assert (grant.new_xp, grant.new_feathers) == (10, 1)

    @pytest.mark.parametrize("xp,feathers", [(-1, 0), (0, -5)])
    def test_negative_amounts_rejected(self, xp, feathers):
        with pytest.raises(InvalidPoints):
            RewardEngine.grant(100, 10, xp, feathers)
