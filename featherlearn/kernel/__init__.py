"""
Kernel layer

Persistent state and the services every feature builds on:
- Data models (accounts, lessons, progress, leagues, quest claims)
- Append-only event log
- Identity (password hashing, access tokens)
- Domain error types
"""

from featherlearn.kernel.models import (
    User,
    UserRole,
    Follow,
    Lesson,
    Exercise,
    LessonProgress,
    ProgressStatus,
    LeagueTier,
    QuestClaim,
    EventLog,
    EventType,
)

__all__ = [
    "User",
    "UserRole",
    "Follow",
    "Lesson",
    "Exercise",
    "LessonProgress",
    "ProgressStatus",
    "LeagueTier",
    "QuestClaim",
    "EventLog",
    "EventType",
]
