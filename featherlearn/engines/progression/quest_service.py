"""
Quest Service - metrics snapshots, quest boards and claim-once rewards (DB-backed).
"""

import uuid
from datetime import date, datetime
from typing import List, Optional, Set

from pydantic import BaseModel
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.config import Settings, get_settings
from featherlearn.engines.progression.ledger import ProgressionLedger
from featherlearn.engines.progression.progress_service import ProgressService
from featherlearn.engines.progression.quests import (
    CATALOGS,
    QuestCadence,
    QuestEvaluator,
    QuestMetrics,
    QuestReward,
    QuestStatus,
    find_quest,
    period_key,
    week_start,
)
from featherlearn.engines.progression.streak import day_bounds, longest_streak
from featherlearn.kernel.errors import AlreadyClaimed, NotFoundError, ValidationError
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.events.event_types import QuestClaimedEvent
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.models.progress import LessonProgress, ProgressStatus
from featherlearn.kernel.models.quest_claim import QuestClaim
from featherlearn.kernel.models.user import Follow, User
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)

PERFECT_SCORE = 100


class QuestBoard(BaseModel):
    cadence: QuestCadence
    period_key: str
    quests: List[QuestStatus]
    completed_count: int
    claimed_count: int
    total: int


class ClaimResult(BaseModel):
    quest_id: str
    cadence: QuestCadence
    period_key: str
    rewards: QuestReward
    total_xp: int
    total_feathers: int
    level: int


class TodaySummary(BaseModel):
    lessons_completed: int
    time_spent: int  # minutes
    xp_earned: int
    feathers_earned: int


class OverallSummary(BaseModel):
    total_lessons: int
    total_time_spent: int  # minutes
    total_xp: int
    total_feathers: int
    current_streak: int
    current_level: int
    current_league: str


class QuestSummary(BaseModel):
    today: TodaySummary
    overall: OverallSummary


class QuestService:
    """Quests are evaluated on read; claims are the only persisted state."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.ledger = ProgressionLedger(session, self.settings)
        self.progress = ProgressService(session, self.settings)
        self.event_store = EventStore(session)

    def _day_start(self, day: date) -> datetime:
        return day_bounds(day, self.settings.reference_timezone)[0]

    async def _completed_since(self, user_id: uuid.UUID, since: datetime) -> List[LessonProgress]:
        return await self.progress.completed_rows(user_id, since=since)

    async def gather_metrics(self, user: User, today: Optional[date] = None) -> QuestMetrics:
        """Snapshot every metric a quest can target."""
        today = today or self.ledger.today()
        today_rows = await self._completed_since(user.id, self._day_start(today))
        week_since = self._day_start(week_start(today))
        week_rows = await self._completed_since(user.id, week_since)

        totals = (
            await self.session.execute(
                select(
                    func.count(LessonProgress.id),
                    func.coalesce(
                        func.sum(case((LessonProgress.score == PERFECT_SCORE, 1), else_=0)), 0
                    ),
                    func.coalesce(func.sum(LessonProgress.time_spent), 0),
                ).where(
                    LessonProgress.user_id == user.id,
                    LessonProgress.status == ProgressStatus.COMPLETED.value,
                )
            )
        ).one()
        following = (
            await self.session.execute(
                select(func.count(Follow.id)).where(Follow.follower_id == user.id)
            )
        ).scalar() or 0
        league_points_week = await self.event_store.sum_payload_field(
            user.id, EventType.LEAGUE_POINTS_ADDED, "points_gained", since=week_since
        )
        ladder = await self.ledger.load_ladder()
        live = self.progress.live_streak(user)
        best = max(longest_streak(await self.progress.completion_dates(user.id)), live)

        return QuestMetrics(
            lessons_today=len(today_rows),
            perfect_scores_today=sum(1 for r in today_rows if r.score == PERFECT_SCORE),
            minutes_today=sum(r.time_spent for r in today_rows) // 60,
            lessons_this_week=len(week_rows),
            perfect_scores_this_week=sum(1 for r in week_rows if r.score == PERFECT_SCORE),
            league_points_this_week=league_points_week,
            current_streak=live,
            best_streak=best,
            lessons_total=totals[0],
            perfect_scores_total=int(totals[1]),
            promoted=1 if user.league != ladder.lowest.name else 0,
            following=following,
            minutes_total=int(totals[2]) // 60,
        )

    async def claimed_ids(self, user_id: uuid.UUID, cadence: QuestCadence, key: str) -> Set[str]:
        ids = [q.id for q in CATALOGS[cadence]]
        result = await self.session.execute(
            select(QuestClaim.quest_id).where(
                QuestClaim.user_id == user_id,
                QuestClaim.period_key == key,
                QuestClaim.quest_id.in_(ids),
            )
        )
        return set(result.scalars().all())

    async def board(self, user: User, cadence: QuestCadence) -> QuestBoard:
        today = self.ledger.today()
        key = period_key(cadence, today)
        metrics = await self.gather_metrics(user, today)
        statuses = QuestEvaluator.evaluate_all(
            CATALOGS[cadence], metrics, await self.claimed_ids(user.id, cadence, key)
        )
        return QuestBoard(
            cadence=cadence,
            period_key=key,
            quests=statuses,
            completed_count=sum(1 for s in statuses if s.completed),
            claimed_count=sum(1 for s in statuses if s.claimed),
            total=len(statuses),
        )

    async def claim(
        self,
        user: User,
        quest_id: str,
        cadence: Optional[QuestCadence] = None,
    ) -> ClaimResult:
        """
        Collect a quest's reward once per period.

        Raises:
            NotFoundError: Unknown quest id
            ValidationError: Quest not completed yet
            AlreadyClaimed: Reward already collected this period
        """
        quest = find_quest(quest_id, cadence)
        if quest is None:
            raise NotFoundError(f"Quest not found: {quest_id}")

        # Serialize claims per user before checking
        locked = await self.ledger.lock_user(user.id)
        today = self.ledger.today()
        key = period_key(quest.cadence, today)

        existing = await self.session.execute(
            select(QuestClaim.id).where(
                QuestClaim.user_id == locked.id,
                QuestClaim.quest_id == quest.id,
                QuestClaim.period_key == key,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise AlreadyClaimed(quest.id)

        status = QuestEvaluator.evaluate(quest, await self.gather_metrics(locked, today))
        if not status.completed:
            raise ValidationError(f"Quest not completed yet: {quest.id}", code="quest_incomplete")

        self.session.add(
            QuestClaim(
                user_id=locked.id,
                quest_id=quest.id,
                period_key=key,
                xp_awarded=quest.reward.xp,
                feathers_awarded=quest.reward.feathers,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise AlreadyClaimed(quest.id) from exc

        grant = await self.ledger.grant_rewards(
            locked, quest.reward.xp, quest.reward.feathers, source="quest", quest_id=quest.id
        )
        await self.event_store.log_from_model(
            event_type=EventType.QUEST_CLAIMED,
            entity_type="user",
            entity_id=locked.id,
            user_id=locked.id,
            payload_model=QuestClaimedEvent(
                quest_id=quest.id,
                period_key=key,
                xp=quest.reward.xp,
                feathers=quest.reward.feathers,
            ),
        )
        logger.info("Quest claimed", extra={"quest_id": quest.id, "period_key": key})

        return ClaimResult(
            quest_id=quest.id,
            cadence=quest.cadence,
            period_key=key,
            rewards=quest.reward,
            total_xp=grant.new_xp,
            total_feathers=grant.new_feathers,
            level=grant.new_level,
        )

    async def summary(self, user: User) -> QuestSummary:
        today_rows = await self._completed_since(user.id, self._day_start(self.ledger.today()))
        overall = await self.progress.overall_stats(user.id)
        return QuestSummary(
            today=TodaySummary(
                lessons_completed=len(today_rows),
                time_spent=sum(r.time_spent for r in today_rows) // 60,
                xp_earned=sum(r.xp_earned for r in today_rows),
                feathers_earned=sum(r.feathers_earned for r in today_rows),
            ),
            overall=OverallSummary(
                total_lessons=overall.total_lessons,
                total_time_spent=overall.total_time_spent // 60,
                total_xp=user.xp,
                total_feathers=user.feathers,
                current_streak=self.progress.live_streak(user),
                current_level=user.level,
                current_league=user.league,
            ),
        )
