"""
Immutable event log for audit trail.

Every reward-bearing transition (XP, feathers, streak, league points,
quest claims) is recorded here in the same transaction as the change.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, Text, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from featherlearn.kernel.models.base import Base, generate_uuid, utcnow


class EventType(str, Enum):
    """All event types for the audit log."""

    # User events
    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    USER_FOLLOWED = "user.followed"
    USER_UNFOLLOWED = "user.unfollowed"

    # Lesson events
    LESSON_CREATED = "lesson.created"
    LESSON_UPDATED = "lesson.updated"
    LESSON_DEACTIVATED = "lesson.deactivated"
    LESSON_STARTED = "lesson.started"
    LESSON_SUBMITTED = "lesson.submitted"
    LESSON_COMPLETED = "lesson.completed"
    LESSON_FAILED = "lesson.failed"
    PROGRESS_RESET = "lesson.progress_reset"

    # Progression events
    REWARD_GRANTED = "progression.reward_granted"
    STREAK_UPDATED = "progression.streak_updated"

    # League events
    LEAGUE_POINTS_ADDED = "league.points_added"
    LEAGUE_PROMOTED = "league.promoted"
    LEAGUE_TIER_CREATED = "league.tier_created"
    LEAGUE_TIER_UPDATED = "league.tier_updated"
    LEAGUE_TIER_DELETED = "league.tier_deleted"

    # Quest events
    QUEST_CLAIMED = "quest.claimed"


class EventLog(Base):
    """
    Immutable audit event log.

    This table is append-only - no updates or deletes allowed.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )

    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Entity reference
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )

    # Actor; system events (ladder seeding) have none
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_user_time", "user_id", "created_at"),
        Index("ix_event_logs_user_type_time", "user_id", "event_type", "created_at"),
    )

    def __repr__(self) -> str:
        event_type = getattr(self.event_type, "value", self.event_type)
        return f"<EventLog {event_type} {self.entity_type}:{self.entity_id}>"
