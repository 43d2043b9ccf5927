"""
Per-user lesson progress.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from featherlearn.kernel.models.base import Base, TimestampMixin, generate_uuid
from featherlearn.kernel.models.lesson import Lesson


class ProgressStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


class LessonProgress(Base, TimestampMixin):
    """
    One record per (user, lesson).

    The version column is checked on every UPDATE; two sessions completing
    the same record concurrently cannot both succeed.
    """

    __tablename__ = "lesson_progress"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[ProgressStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ProgressStatus.NOT_STARTED,
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mistakes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # seconds
    exercise_results: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    feathers_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    league_points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_maintained: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    lesson: Mapped[Lesson] = relationship("Lesson", lazy="selectin")

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_lesson_progress_score_range"),
        Index("ix_lesson_progress_user_status", "user_id", "status"),
        Index("ix_lesson_progress_user_completed", "user_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return f"<LessonProgress {self.user_id}:{self.lesson_id} {self.status}>"
