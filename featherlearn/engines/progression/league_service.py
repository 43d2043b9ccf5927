"""
League Service - ladder configuration, leaderboards and point updates (DB-backed).
"""

import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.config import Settings, get_settings
from featherlearn.engines.progression.ledger import ProgressionLedger
from featherlearn.engines.progression.league import (
    DEFAULT_LADDER,
    PointsUpdate,
    TierSpec,
    check_overlap,
    validate_ladder,
)
from featherlearn.kernel.errors import ConflictError, NotFoundError
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.models.league import LeagueTier
from featherlearn.kernel.models.user import Follow, User
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    name: str
    profile_uri: Optional[str] = None
    level: int
    xp: int
    feathers: int
    streak: int
    league: str
    league_points: int
    is_current_user: bool = False


class LeagueStatus(BaseModel):
    current_league: TierSpec
    league_points: int
    league_week: int
    next_league: Optional[TierSpec] = None
    points_to_next: Optional[int] = None
    progress_to_next: int
    rank: int
    league_rank: int


async def seed_league_tiers(session: AsyncSession) -> int:
    """Insert the default ladder when no tiers are configured. Returns rows created."""
    existing = (await session.execute(select(func.count(LeagueTier.id)))).scalar() or 0
    if existing:
        return 0

    validate_ladder(DEFAULT_LADDER)
    for spec in DEFAULT_LADDER:
        session.add(LeagueTier(**spec.model_dump()))
    await session.flush()
    return len(DEFAULT_LADDER)


def _entry(user: User, rank: int, viewer_id: Optional[uuid.UUID] = None) -> LeaderboardEntry:
    return LeaderboardEntry(
        rank=rank,
        user_id=user.id,
        name=user.name,
        profile_uri=user.profile_uri,
        level=user.level,
        xp=user.xp,
        feathers=user.feathers,
        streak=user.streak,
        league=user.league,
        league_points=user.league_points,
        is_current_user=user.id == viewer_id,
    )


def _check_unique(spec: TierSpec, others: List[TierSpec]) -> None:
    for tier in others:
        if tier.name == spec.name:
            raise ConflictError(f"League '{spec.name}' already exists", code="duplicate_league")
        if tier.level == spec.level:
            raise ConflictError(f"League level {spec.level} already used", code="duplicate_league")


def _rank_entries(
    users: List[User], first_rank: int, viewer_id: Optional[uuid.UUID] = None
) -> List[LeaderboardEntry]:
    """Assign ranks to an already ordered list; exact ties share a rank."""
    entries: List[LeaderboardEntry] = []
    previous_key = None
    rank = first_rank
    for position, user in enumerate(users):
        key = (user.league_points, user.xp)
        if previous_key is not None and key != previous_key:
            rank = first_rank + position
        entries.append(_entry(user, rank, viewer_id))
        previous_key = key
    return entries


class LeagueService:
    """League reads and writes."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.ledger = ProgressionLedger(session, self.settings)
        self.event_store = EventStore(session)

    # Ladder

    async def list_tiers(self) -> List[Union[LeagueTier, TierSpec]]:
        """Stored tiers by level, or the default ladder when none are stored."""
        result = await self.session.execute(select(LeagueTier).order_by(LeagueTier.level))
        rows = list(result.scalars().all())
        return rows or list(DEFAULT_LADDER)

    async def create_tier(self, spec: TierSpec, actor_id: uuid.UUID) -> LeagueTier:
        """
        Add a tier to the ladder.

        Raises:
            OverlappingLeagueRange: The range intersects an existing tier
            ConflictError: Name or level already used
            ValidationError: The ladder would no longer start at 0 or would have a gap
        """
        existing = await self._stored_specs()
        _check_unique(spec, existing)
        check_overlap(spec, existing)
        validate_ladder(existing + [spec])

        tier = LeagueTier(**spec.model_dump())
        self.session.add(tier)
        await self._flush_tiers()

        await self.event_store.log(
            event_type=EventType.LEAGUE_TIER_CREATED,
            entity_type="league_tier",
            entity_id=tier.id,
            user_id=actor_id,
            payload=spec.model_dump(),
        )
        logger.info("League tier created", extra={"league": spec.name})
        return tier

    async def update_tier(
        self, tier_id: uuid.UUID, changes: Dict[str, Any], actor_id: uuid.UUID
    ) -> LeagueTier:
        """
        Change a tier in place. The whole ladder is re-checked with the change
        applied, and learners in a renamed tier follow the new name.

        Raises:
            NotFoundError: No such tier
            ConflictError: Name or level already used by another tier
            OverlappingLeagueRange, ValidationError: The resulting ladder is invalid
        """
        tier = await self._get_tier(tier_id)
        others = await self._stored_specs(exclude=tier.id)
        updated = TierSpec.model_validate(tier, from_attributes=True).model_copy(update=changes)
        _check_unique(updated, others)
        validate_ladder(others + [updated])

        old_name = tier.name
        for field, value in changes.items():
            setattr(tier, field, value)
        if updated.name != old_name:
            await self.session.execute(
                update(User).where(User.league == old_name).values(league=updated.name)
            )
        await self._flush_tiers()

        await self.event_store.log(
            event_type=EventType.LEAGUE_TIER_UPDATED,
            entity_type="league_tier",
            entity_id=tier.id,
            user_id=actor_id,
            payload={"name": old_name, "changes": changes},
        )
        logger.info("League tier updated", extra={"league": updated.name})
        return tier

    async def delete_tier(self, tier_id: uuid.UUID, actor_id: uuid.UUID) -> None:
        """
        Remove a tier. The tiers left behind must still form a ladder, so only
        the top tier (or a tier whose neighbours already meet) can go.
        """
        tier = await self._get_tier(tier_id)
        validate_ladder(await self._stored_specs(exclude=tier.id))

        await self.event_store.log(
            event_type=EventType.LEAGUE_TIER_DELETED,
            entity_type="league_tier",
            entity_id=tier.id,
            user_id=actor_id,
            payload={"name": tier.name, "min_points": tier.min_points},
        )
        await self.session.delete(tier)
        await self.session.flush()

    async def _get_tier(self, tier_id: uuid.UUID) -> LeagueTier:
        tier = await self.session.get(LeagueTier, tier_id)
        if tier is None:
            raise NotFoundError("League tier not found")
        return tier

    async def _stored_specs(self, exclude: Optional[uuid.UUID] = None) -> List[TierSpec]:
        query = select(LeagueTier)
        if exclude is not None:
            query = query.where(LeagueTier.id != exclude)
        result = await self.session.execute(query)
        return [TierSpec.model_validate(r, from_attributes=True) for r in result.scalars().all()]

    async def _flush_tiers(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("League tier already exists", code="duplicate_league") from exc

    # Points

    async def add_points(self, user_id: uuid.UUID, amount: int) -> PointsUpdate:
        """Lock the user and add league points (promotion included)."""
        user = await self.ledger.lock_user(user_id)
        return await self.ledger.add_league_points(user, amount)

    # Ranking

    @staticmethod
    def _ahead_of(user: User):
        return or_(
            User.league_points > user.league_points,
            and_(User.league_points == user.league_points, User.xp > user.xp),
        )

    async def rank_of(self, user: User, league: Optional[str] = None) -> int:
        """1 + number of active users strictly ahead (league points, then XP)."""
        conditions = [User.is_active.is_(True), self._ahead_of(user)]
        if league:
            conditions.append(User.league == league)
        ahead = (await self.session.execute(select(func.count(User.id)).where(*conditions))).scalar()
        return (ahead or 0) + 1

    async def leaderboard(
        self,
        viewer: User,
        league: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[List[LeaderboardEntry], int, Optional[int]]:
        """
        One page of the leaderboard.

        Returns:
            (entries, total users, viewer's rank within the same filter or None
            when the viewer is not in the requested league)
        """
        conditions = [User.is_active.is_(True)]
        if league:
            conditions.append(User.league == league)

        total = (await self.session.execute(select(func.count(User.id)).where(*conditions))).scalar() or 0
        result = await self.session.execute(
            select(User)
            .where(*conditions)
            .order_by(User.league_points.desc(), User.xp.desc(), User.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = list(result.scalars().all())

        entries: List[LeaderboardEntry] = []
        if users:
            first_rank = await self.rank_of(users[0], league)
            entries = _rank_entries(users, first_rank, viewer.id)
        # Viewers outside the requested league have no rank on it
        user_rank = None
        if not league or viewer.league == league:
            user_rank = await self.rank_of(viewer, league)
        return entries, total, user_rank

    async def friends_leaderboard(self, user: User, limit: int = 20) -> tuple[List[LeaderboardEntry], int, int]:
        """
        The user plus everyone they follow, ranked the same way.

        Returns:
            (entries, user's rank among them, number of people followed)
        """
        following = select(Follow.following_id).where(Follow.follower_id == user.id)
        result = await self.session.execute(
            select(User)
            .where(or_(User.id == user.id, and_(User.id.in_(following), User.is_active.is_(True))))
            .order_by(User.league_points.desc(), User.xp.desc(), User.id)
        )
        users = list(result.scalars().all())
        entries = _rank_entries(users, 1, user.id)
        own_rank = next(e.rank for e in entries if e.is_current_user)
        return entries[:limit], own_rank, len(users) - 1

    async def status(self, user: User) -> LeagueStatus:
        ladder = await self.ledger.load_ladder()
        current = ladder.get(user.league) or ladder.tier_for(user.league_points)
        following = ladder.next_tier(current.name)
        return LeagueStatus(
            current_league=current,
            league_points=user.league_points,
            league_week=user.league_week,
            next_league=following,
            points_to_next=max(0, following.min_points - user.league_points) if following else None,
            progress_to_next=ladder.progress_to_next(user.league_points),
            rank=await self.rank_of(user),
            league_rank=await self.rank_of(user, user.league),
        )
