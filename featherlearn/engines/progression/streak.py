"""
Streak Tracker - consecutive-day learning streaks.

All arithmetic is on calendar dates; callers decide what "today" is by
converting the current instant into the reference timezone first.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel


class StreakChange(str, Enum):
    EXTENDED = "extended"
    RESET = "reset"
    UNCHANGED = "unchanged"


class StreakUpdate(BaseModel):
    old_streak: int
    new_streak: int
    last_lesson_date: date
    change: StreakChange

    @property
    def maintained(self) -> bool:
        """True when an existing streak carried on (same day or next day)."""
        return self.change != StreakChange.RESET


def local_today(tz_name: str = "UTC", now: Optional[datetime] = None) -> date:
    """Calendar date of ``now`` (default: current time) in the given timezone."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()


def day_bounds(day: date, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """UTC instants [start, end) covering one local calendar day."""
    tz = ZoneInfo(tz_name)
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def advance_streak(
    streak: int,
    last_lesson_date: Optional[date],
    today: date,
) -> StreakUpdate:
    """
    Apply one completed lesson on ``today`` to a streak.

    Same day: unchanged. Previous day: +1. Anything else (no history, gap,
    or a last date in the future): restart at 1.
    """
    if last_lesson_date == today:
        return StreakUpdate(
            old_streak=streak,
            new_streak=streak,
            last_lesson_date=today,
            change=StreakChange.UNCHANGED,
        )
    if last_lesson_date is not None and today - last_lesson_date == timedelta(days=1):
        return StreakUpdate(
            old_streak=streak,
            new_streak=streak + 1,
            last_lesson_date=today,
            change=StreakChange.EXTENDED,
        )
    return StreakUpdate(
        old_streak=streak,
        new_streak=1,
        last_lesson_date=today,
        change=StreakChange.RESET,
    )


def longest_streak(dates: Iterable[date]) -> int:
    """Longest run of consecutive calendar days in ``dates``."""
    days = sorted(set(dates))
    best = run = 0
    previous: Optional[date] = None
    for day in days:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def current_streak_is_live(last_lesson_date: Optional[date], today: date) -> bool:
    """A streak is still alive if the last lesson was today or yesterday."""
    if last_lesson_date is None:
        return False
    return (today - last_lesson_date) <= timedelta(days=1)
