"""
Progress Service - read models over a user's lesson progress (DB-backed).
"""

import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.config import Settings, get_settings
from featherlearn.engines.progression.streak import (
    current_streak_is_live,
    local_today,
    longest_streak,
)
from featherlearn.kernel.errors import ValidationError
from featherlearn.kernel.models.base import as_utc, enum_value
from featherlearn.kernel.models.progress import LessonProgress, ProgressStatus
from featherlearn.kernel.models.user import User

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}
HISTORY_DAYS = 30


class CompletionStats(BaseModel):
    total_lessons: int = 0
    average_score: float = 0.0
    total_time_spent: int = 0  # seconds
    total_mistakes: int = 0
    total_xp_earned: int = 0
    total_feathers_earned: int = 0


class GroupStats(BaseModel):
    key: str
    count: int
    average_score: float


class DailyStats(BaseModel):
    day: date
    lessons_completed: int
    xp_earned: int


class ProgressStats(BaseModel):
    period: str
    overview: CompletionStats
    by_type: List[GroupStats]
    by_category: List[GroupStats]
    daily: List[DailyStats]
    current_streak: int
    current_level: int
    current_xp: int
    current_feathers: int
    current_league: str


class StreakInfo(BaseModel):
    current_streak: int
    longest_streak: int
    streak_level: int
    streak_goal: int
    streak_freeze: int
    last_lesson_date: Optional[date]
    history: List[DailyStats]


def _average(scores: List[int]) -> float:
    return round(sum(scores) / len(scores), 1) if scores else 0.0


def summarize(rows: List[LessonProgress]) -> CompletionStats:
    return CompletionStats(
        total_lessons=len(rows),
        average_score=_average([r.score for r in rows]),
        total_time_spent=sum(r.time_spent for r in rows),
        total_mistakes=sum(r.mistakes for r in rows),
        total_xp_earned=sum(r.xp_earned for r in rows),
        total_feathers_earned=sum(r.feathers_earned for r in rows),
    )


class ProgressService:
    """Queries and aggregates over LessonProgress rows."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.tz = ZoneInfo(self.settings.reference_timezone)

    def local_date(self, moment: datetime) -> date:
        return as_utc(moment).astimezone(self.tz).date()

    def today(self) -> date:
        return local_today(self.settings.reference_timezone)

    async def list_progress(
        self,
        user_id: uuid.UUID,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[List[LessonProgress], int]:
        """A page of the user's progress records, most recently touched first."""
        conditions = [LessonProgress.user_id == user_id]
        if status:
            if status not in {s.value for s in ProgressStatus}:
                raise ValidationError(f"Unknown progress status: {status}", code="invalid_status")
            conditions.append(LessonProgress.status == status)

        total = (
            await self.session.execute(select(func.count(LessonProgress.id)).where(*conditions))
        ).scalar() or 0

        order = (
            LessonProgress.completed_at.desc()
            if status == ProgressStatus.COMPLETED.value
            else LessonProgress.updated_at.desc()
        )
        result = await self.session.execute(
            select(LessonProgress)
            .where(*conditions)
            .order_by(order, LessonProgress.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def completed_rows(
        self,
        user_id: uuid.UUID,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[LessonProgress]:
        query = select(LessonProgress).where(
            LessonProgress.user_id == user_id,
            LessonProgress.status == ProgressStatus.COMPLETED.value,
        )
        if since is not None:
            query = query.where(LessonProgress.completed_at >= since)
        if until is not None:
            query = query.where(LessonProgress.completed_at < until)
        result = await self.session.execute(query.order_by(LessonProgress.completed_at))
        return list(result.scalars().all())

    async def overall_stats(self, user_id: uuid.UUID) -> CompletionStats:
        return summarize(await self.completed_rows(user_id))

    def _daily(self, rows: List[LessonProgress], days: int = HISTORY_DAYS) -> List[DailyStats]:
        buckets: Dict[date, List[LessonProgress]] = defaultdict(list)
        for row in rows:
            if row.completed_at is not None:
                buckets[self.local_date(row.completed_at)].append(row)
        ordered = sorted(buckets.items(), key=lambda item: item[0], reverse=True)[:days]
        return [
            DailyStats(day=day, lessons_completed=len(items), xp_earned=sum(r.xp_earned for r in items))
            for day, items in ordered
        ]

    @staticmethod
    def _group(rows: List[LessonProgress], attr: str) -> List[GroupStats]:
        groups: Dict[str, List[int]] = defaultdict(list)
        for row in rows:
            groups[str(enum_value(getattr(row.lesson, attr)))].append(row.score)
        return [
            GroupStats(key=key, count=len(scores), average_score=_average(scores))
            for key, scores in sorted(groups.items())
        ]

    async def stats(self, user: User, period: str = "all") -> ProgressStats:
        """
        Completion statistics for a period.

        Args:
            user: The user
            period: "week", "month", "year" or "all"
        """
        if period != "all" and period not in PERIOD_DAYS:
            raise ValidationError(f"Unknown period: {period}", code="invalid_period")

        since = None
        if period in PERIOD_DAYS:
            since = datetime.now(timezone.utc) - timedelta(days=PERIOD_DAYS[period])
        rows = await self.completed_rows(user.id, since=since)

        return ProgressStats(
            period=period,
            overview=summarize(rows),
            by_type=self._group(rows, "lesson_type"),
            by_category=self._group(rows, "category"),
            daily=self._daily(rows),
            current_streak=self.live_streak(user),
            current_level=user.level,
            current_xp=user.xp,
            current_feathers=user.feathers,
            current_league=user.league,
        )

    def live_streak(self, user: User) -> int:
        """Stored streak, or 0 once a full day has been missed."""
        if current_streak_is_live(user.last_lesson_date, self.today()):
            return user.streak
        return 0

    async def completion_dates(self, user_id: uuid.UUID) -> List[date]:
        result = await self.session.execute(
            select(LessonProgress.completed_at).where(
                LessonProgress.user_id == user_id,
                LessonProgress.status == ProgressStatus.COMPLETED.value,
                LessonProgress.completed_at.is_not(None),
            )
        )
        return [self.local_date(moment) for moment in result.scalars().all()]

    async def streak_info(self, user: User) -> StreakInfo:
        rows = await self.completed_rows(user.id)
        dates = [self.local_date(r.completed_at) for r in rows if r.completed_at is not None]
        return StreakInfo(
            current_streak=self.live_streak(user),
            longest_streak=max(longest_streak(dates), user.streak),
            streak_level=user.streak_level,
            streak_goal=user.streak_goal,
            streak_freeze=user.streak_freeze,
            last_lesson_date=user.last_lesson_date,
            history=self._daily(rows),
        )
