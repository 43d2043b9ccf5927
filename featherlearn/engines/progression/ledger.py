"""
Progression Ledger - the only code that writes a user's reward fields.

XP, feathers, level, streak and league standing change through the
transitions here. Each one works on a user row the caller has locked with
``lock_user`` and appends an audit event.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.config import Settings, get_settings
from featherlearn.engines.progression.league import LeagueLadder, PointsUpdate, add_points
from featherlearn.engines.progression.rewards import RewardEngine, RewardGrant
from featherlearn.engines.progression.streak import StreakUpdate, advance_streak, local_today
from featherlearn.kernel.errors import NotFoundError
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.events.event_types import (
    LeaguePointsAddedEvent,
    LeaguePromotedEvent,
    RewardGrantedEvent,
    StreakUpdatedEvent,
)
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.models.league import LeagueTier
from featherlearn.kernel.models.user import User
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)


class ProgressionLedger:
    """Reward, streak and league transitions for one session."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.event_store = EventStore(session)

    def today(self) -> date:
        return local_today(self.settings.reference_timezone)

    async def lock_user(self, user_id: uuid.UUID) -> User:
        """Load the user with a row lock (FOR UPDATE) and fresh column values."""
        query = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def load_ladder(self) -> LeagueLadder:
        """Configured tiers, or the default ladder when none are stored."""
        result = await self.session.execute(select(LeagueTier).order_by(LeagueTier.min_points))
        rows = list(result.scalars().all())
        if not rows:
            return LeagueLadder.default()
        return LeagueLadder(rows)

    async def grant_rewards(
        self,
        user: User,
        xp: int,
        feathers: int,
        source: str,
        entity_id: Optional[uuid.UUID] = None,
        quest_id: Optional[str] = None,
    ) -> RewardGrant:
        """Add XP and feathers and recompute the level."""
        grant = RewardEngine.grant(
            user.xp,
            user.feathers,
            xp,
            feathers,
            xp_per_level=self.settings.xp_per_level,
        )
        user.xp = grant.new_xp
        user.feathers = grant.new_feathers
        user.level = grant.new_level

        await self.event_store.log_from_model(
            event_type=EventType.REWARD_GRANTED,
            entity_type="user",
            entity_id=entity_id or user.id,
            user_id=user.id,
            payload_model=RewardGrantedEvent(
                source=source,
                xp=xp,
                feathers=feathers,
                total_xp=grant.new_xp,
                total_feathers=grant.new_feathers,
                old_level=grant.old_level,
                new_level=grant.new_level,
                quest_id=quest_id,
            ),
        )
        if grant.leveled_up:
            logger.info(
                "Level up",
                extra={"old_level": grant.old_level, "new_level": grant.new_level},
            )
        return grant

    async def record_streak(self, user: User, today: Optional[date] = None) -> StreakUpdate:
        """Apply a completed lesson on ``today`` (reference timezone) to the streak."""
        day = today or self.today()
        update = advance_streak(user.streak, user.last_lesson_date, day)
        user.streak = update.new_streak
        user.last_lesson_date = update.last_lesson_date

        await self.event_store.log_from_model(
            event_type=EventType.STREAK_UPDATED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload_model=StreakUpdatedEvent(
                old_streak=update.old_streak,
                new_streak=update.new_streak,
                change=update.change.value,
                day=day.isoformat(),
            ),
        )
        return update

    async def add_league_points(
        self,
        user: User,
        amount: int,
        ladder: Optional[LeagueLadder] = None,
    ) -> PointsUpdate:
        """Add league points, promoting the user if they cross a tier floor."""
        ladder = ladder or await self.load_ladder()
        update = add_points(ladder, user.league, user.league_points, user.league_week, amount)
        user.league_points = update.new_points
        user.league = update.new_league
        user.league_week = update.league_week

        await self.event_store.log_from_model(
            event_type=EventType.LEAGUE_POINTS_ADDED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload_model=LeaguePointsAddedEvent(
                points_gained=update.points_gained,
                old_points=update.old_points,
                new_points=update.new_points,
                old_league=update.old_league,
                new_league=update.new_league,
                league_week=update.league_week,
            ),
        )
        if update.promoted:
            await self.event_store.log_from_model(
                event_type=EventType.LEAGUE_PROMOTED,
                entity_type="user",
                entity_id=user.id,
                user_id=user.id,
                payload_model=LeaguePromotedEvent(
                    old_league=update.old_league,
                    new_league=update.new_league,
                    league_points=update.new_points,
                ),
            )
            logger.info(
                "League change",
                extra={"old_league": update.old_league, "new_league": update.new_league},
            )
        return update
