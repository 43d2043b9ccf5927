"""Unit tests for streak transitions and calendar-day helpers."""

from datetime import date, datetime, timezone

from featherlearn.engines.progression.streak import (
    StreakChange,
    advance_streak,
    current_streak_is_live,
    day_bounds,
    local_today,
    longest_streak,
)

TODAY = date(2026, 3, 10)


class TestAdvanceStreak:

    def test_first_lesson_starts_streak(self):
        update = advance_streak(0, None, TODAY)
        assert update.new_streak == 1
        assert update.change == StreakChange.RESET
        assert update.maintained is False
        assert update.last_lesson_date == TODAY

    def test_next_day_extends(self):
        update = advance_streak(4, date(2026, 3, 9), TODAY)
        assert update.new_streak == 5
        assert update.change == StreakChange.EXTENDED
        assert update.maintained is True

    def test_same_day_is_unchanged(self):
        update = advance_streak(4, TODAY, TODAY)
        assert update.new_streak == 4
        assert update.change == StreakChange.UNCHANGED
        assert update.maintained is True

    def test_gap_resets(self):
        update = advance_streak(12, date(2026, 3, 7), TODAY)
        assert update.new_streak == 1
        assert update.change == StreakChange.RESET

    def test_future_last_date_resets(self):
        update = advance_streak(3, date(2026, 3, 11), TODAY)
        assert update.new_streak == 1

    def test_month_boundary(self):
        update = advance_streak(2, date(2026, 2, 28), date(2026, 3, 1))
        assert update.new_streak == 3


class TestLongestStreak:

    def test_empty(self):
        assert longest_streak([]) == 0

    def test_finds_longest_run(self):
        days = [date(2026, 1, d) for d in (1, 2, 3, 5, 6, 10, 11, 12, 13)]
        assert longest_streak(days) == 4

    def test_duplicates_and_order_do_not_matter(self):
        days = [date(2026, 1, 3), date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 2)]
        assert longest_streak(days) == 3


class TestLiveStreak:

    def test_today_and_yesterday_are_live(self):
        assert current_streak_is_live(TODAY, TODAY) is True
        assert current_streak_is_live(date(2026, 3, 9), TODAY) is True

    def test_missed_day_is_not_live(self):
        assert current_streak_is_live(date(2026, 3, 8), TODAY) is False
        assert current_streak_is_live(None, TODAY) is False


class TestCalendarDays:

    def test_timezone_decides_the_day(self):
        moment = datetime(2026, 3, 10, 2, 30, tzinfo=timezone.utc)
        assert local_today("UTC", moment) == date(2026, 3, 10)
        assert local_today("America/New_York", moment) == date(2026, 3, 9)
        assert local_today("Asia/Tokyo", moment) == date(2026, 3, 10)

    def test_naive_now_is_treated_as_utc(self):
        assert local_today("UTC", datetime(2026, 3, 10, 23, 59)) == TODAY

    def test_day_bounds_in_utc(self):
        start, end = day_bounds(TODAY, "UTC")
        assert start == datetime(2026, 3, 10, tzinfo=timezone.utc)
        assert end == datetime(2026, 3, 11, tzinfo=timezone.utc)

    def test_day_bounds_offset_zone(self):
        start, end = day_bounds(date(2026, 1, 15), "Asia/Tokyo")
        assert start == datetime(2026, 1, 14, 15, tzinfo=timezone.utc)
        assert (end - start).total_seconds() == 24 * 3600
