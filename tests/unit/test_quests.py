"""Unit tests for the quest catalog and evaluator."""

from datetime import date

import pytest

from featherlearn.engines.progression.quests import (
    ACHIEVEMENTS,
    DAILY_QUESTS,
    WEEKLY_QUESTS,
    QuestCadence,
    QuestEvaluator,
    QuestMetrics,
    find_quest,
    period_key,
    week_start,
)


class TestCatalog:

    def test_quest_ids_unique_within_each_catalog(self):
        for catalog in (DAILY_QUESTS, WEEKLY_QUESTS, ACHIEVEMENTS):
            ids = [q.id for q in catalog]
            assert len(ids) == len(set(ids))

    def test_find_quest_defaults_to_daily_for_shared_id(self):
        assert find_quest("perfect_score").cadence == QuestCadence.DAILY
        assert find_quest("perfect_score", QuestCadence.ACHIEVEMENT).cadence == QuestCadence.ACHIEVEMENT

    def test_find_quest_unknown(self):
        assert find_quest("does_not_exist") is None
        assert find_quest("first_lesson", QuestCadence.DAILY) is None


class TestPeriods:

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2026, 3, 8), date(2026, 3, 8)),    # Sunday
            (date(2026, 3, 11), date(2026, 3, 8)),   # Wednesday
            (date(2026, 3, 14), date(2026, 3, 8)),   # Saturday
        ],
    )
    def test_week_starts_on_sunday(self, day, expected):
        assert week_start(day) == expected

    def test_period_keys(self):
        day = date(2026, 3, 11)
        assert period_key(QuestCadence.DAILY, day) == "2026-03-11"
        assert period_key(QuestCadence.WEEKLY, day) == "2026-03-08"
        assert period_key(QuestCadence.ACHIEVEMENT, day) == "lifetime"


class TestEvaluator:

    def test_progress_is_capped_at_target(self):
        quest = find_quest("complete_lessons")
        status = QuestEvaluator.evaluate(quest, QuestMetrics(lessons_today=5))
        assert status.progress == 3
        assert status.percent == 100
        assert status.completed is True

    def test_partial_progress_percent(self):
        quest = find_quest("complete_lessons")
        status = QuestEvaluator.evaluate(quest, QuestMetrics(lessons_today=1))
        assert status.progress == 1
        assert status.percent == 33
        assert status.completed is False

    def test_practice_time_in_minutes(self):
        quest = find_quest("practice_time")
        assert QuestEvaluator.evaluate(quest, QuestMetrics(minutes_today=14)).completed is False
        assert QuestEvaluator.evaluate(quest, QuestMetrics(minutes_today=15)).completed is True

    def test_streak_achievement_uses_best_streak(self):
        quest = find_quest("streak_7")
        status = QuestEvaluator.evaluate(quest, QuestMetrics(current_streak=0, best_streak=9))
        assert status.completed is True

    def test_evaluate_all_marks_claimed(self):
        statuses = QuestEvaluator.evaluate_all(
            DAILY_QUESTS, QuestMetrics(lessons_today=3), claimed_ids={"complete_lessons"}
        )
        by_id = {s.id: s for s in statuses}
        assert by_id["complete_lessons"].claimed is True
        assert by_id["perfect_score"].claimed is False
        assert len(statuses) == len(DAILY_QUESTS)

    def test_rewards_come_from_catalog(self):
        status = QuestEvaluator.evaluate(find_quest("first_lesson"), QuestMetrics(lessons_total=1))
        assert (status.reward.xp, status.reward.feathers) == (50, 5)
