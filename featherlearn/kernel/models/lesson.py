"""
Lesson content models.

A lesson owns an ordered list of exercises; exercise order is fixed at
creation and is what submitted answers refer to by index.
"""

import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from featherlearn.kernel.models.base import Base, TimestampMixin, generate_uuid


class LessonType(str, Enum):
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    PRONUNCIATION = "pronunciation"
    CONVERSATION = "conversation"
    READING = "reading"
    LISTENING = "listening"


class LessonCategory(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExerciseType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_BLANK = "fill-blank"
    MATCHING = "matching"
    SPEAKING = "speaking"
    LISTENING = "listening"
    WRITING = "writing"


class Lesson(Base, TimestampMixin):
    """A unit of learning content with scored exercises."""

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    lesson_type: Mapped[LessonType] = mapped_column(String(30), nullable=False, index=True)
    category: Mapped[LessonCategory] = mapped_column(String(30), nullable=False, index=True)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=5)  # minutes
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    feather_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    # Lesson ids (as strings) that must be completed before this one can start
    prerequisites: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    exercises: Mapped[List["Exercise"]] = relationship(
        "Exercise",
        back_populates="lesson",
        order_by="Exercise.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_lessons_difficulty_range"),
        CheckConstraint("xp_reward >= 0", name="ck_lessons_xp_reward_non_negative"),
        CheckConstraint("feather_reward >= 0", name="ck_lessons_feather_reward_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Lesson {self.title}>"


class Exercise(Base):
    """Single exercise at a fixed position inside a lesson."""

    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    exercise_type: Mapped[ExerciseType] = mapped_column(String(30), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="exercises")

    __table_args__ = (
        UniqueConstraint("lesson_id", "position", name="uq_exercises_lesson_position"),
        CheckConstraint("points >= 1", name="ck_exercises_points_positive"),
    )
