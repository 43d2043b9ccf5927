"""
User and social graph models.

A learner's gamification state (XP, level, feathers, streak, league standing)
lives directly on the user row so a lesson completion touches one row.
"""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from featherlearn.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow


class UserRole(str, Enum):
    """User roles in the system."""
    USER = "user"
    ADMIN = "admin"


DEFAULT_USER_SETTINGS = {
    "notifications": True,
    "sound": True,
    "language": "en",
    "theme": "auto",
}


def default_user_settings() -> dict:
    return dict(DEFAULT_USER_SETTINGS)


class User(Base, TimestampMixin):
    """User account with learning progression state."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_uri: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        String(20),
        default=UserRole.USER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    settings: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=default_user_settings,
    )

    # Progression
    xp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    feathers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Streak
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    streak_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    streak_freeze: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    streak_goal: Mapped[int] = mapped_column(Integer, default=7, nullable=False)
    last_lesson_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # League standing
    league: Mapped[str] = mapped_column(String(50), default="Bronze", nullable=False, index=True)
    league_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    league_week: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("xp >= 0", name="ck_users_xp_non_negative"),
        CheckConstraint("feathers >= 0", name="ck_users_feathers_non_negative"),
        CheckConstraint("streak >= 0", name="ck_users_streak_non_negative"),
        CheckConstraint("league_points >= 0", name="ck_users_league_points_non_negative"),
        CheckConstraint("level >= 1", name="ck_users_level_positive"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Follow(Base):
    """Directed follow edge: follower_id follows following_id."""

    __tablename__ = "follows"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    follower_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    )
