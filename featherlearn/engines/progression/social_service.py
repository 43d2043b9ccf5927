"""
Social Service - follow graph and user search (DB-backed).
"""

import uuid
from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.kernel.errors import DuplicateFollow, NotFoundError, ValidationError
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.models.user import Follow, User


class SocialService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def _active_user(self, user_id: uuid.UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        return user

    async def _edge(self, follower_id: uuid.UUID, following_id: uuid.UUID):
        result = await self.session.execute(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.scalar_one_or_none()

    async def follow(self, user: User, target_id: uuid.UUID) -> User:
        """
        Follow another user.

        Raises:
            ValidationError: Following yourself
            NotFoundError: Target does not exist
            DuplicateFollow: Already following
        """
        if target_id == user.id:
            raise ValidationError("You cannot follow yourself", code="self_follow")
        target = await self._active_user(target_id)
        if await self._edge(user.id, target.id):
            raise DuplicateFollow()

        self.session.add(Follow(follower_id=user.id, following_id=target.id))
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateFollow() from exc

        await self.event_store.log(
            event_type=EventType.USER_FOLLOWED,
            entity_type="user",
            entity_id=target.id,
            user_id=user.id,
        )
        return target

    async def unfollow(self, user: User, target_id: uuid.UUID) -> None:
        edge = await self._edge(user.id, target_id)
        if edge is None:
            raise NotFoundError("You are not following this user")
        await self.session.delete(edge)
        await self.session.flush()
        await self.event_store.log(
            event_type=EventType.USER_UNFOLLOWED,
            entity_type="user",
            entity_id=target_id,
            user_id=user.id,
        )

    async def followers(self, user_id: uuid.UUID) -> List[User]:
        result = await self.session.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id, User.is_active.is_(True))
            .order_by(Follow.created_at.desc())
        )
        return list(result.scalars().all())

    async def following(self, user_id: uuid.UUID) -> List[User]:
        result = await self.session.execute(
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id, User.is_active.is_(True))
            .order_by(Follow.created_at.desc())
        )
        return list(result.scalars().all())

    async def counts(self, user_id: uuid.UUID) -> tuple[int, int]:
        """(followers, following) counts."""
        followers = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.following_id == user_id)
        )
        following = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        )
        return followers.scalar() or 0, following.scalar() or 0

    async def is_following(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        return await self._edge(follower_id, following_id) is not None

    async def search(self, viewer: User, query: str, limit: int = 20) -> List[User]:
        """Active users whose name or email contains ``query``, excluding the viewer."""
        term = query.strip()
        if len(term) < 2:
            raise ValidationError("Search query must be at least 2 characters", code="query_too_short")
        pattern = f"%{term}%"
        result = await self.session.execute(
            select(User)
            .where(
                User.is_active.is_(True),
                User.id != viewer.id,
                or_(User.name.ilike(pattern), User.email.ilike(pattern)),
            )
            .order_by(User.xp.desc(), User.id)
            .limit(limit)
        )
        return list(result.scalars().all())
