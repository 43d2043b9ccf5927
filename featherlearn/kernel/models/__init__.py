"""
Kernel Data Models

SQLAlchemy models for accounts, lesson content, progress, leagues,
quest claims and the audit log.
"""

from featherlearn.kernel.models.base import (
    Base,
    TimestampMixin,
    generate_uuid,
    utcnow,
    as_utc,
    enum_value,
)
from featherlearn.kernel.models.user import User, UserRole, Follow, DEFAULT_USER_SETTINGS
from featherlearn.kernel.models.lesson import (
    Lesson,
    LessonType,
    LessonCategory,
    Exercise,
    ExerciseType,
)
from featherlearn.kernel.models.progress import LessonProgress, ProgressStatus
from featherlearn.kernel.models.league import LeagueTier
from featherlearn.kernel.models.quest_claim import QuestClaim
from featherlearn.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    "as_utc",
    "enum_value",
    # User
    "User",
    "UserRole",
    "Follow",
    "DEFAULT_USER_SETTINGS",
    # Lessons
    "Lesson",
    "LessonType",
    "LessonCategory",
    "Exercise",
    "ExerciseType",
    # Progress
    "LessonProgress",
    "ProgressStatus",
    # Leagues
    "LeagueTier",
    # Quests
    "QuestClaim",
    # Event Log
    "EventLog",
    "EventType",
]
