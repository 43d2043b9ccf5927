"""
Audit logging infrastructure.

Provides append-only event logging with typed payloads.
"""

from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.events.event_types import (
    BaseEvent,
    LessonCompletedEvent,
    LessonFailedEvent,
    RewardGrantedEvent,
    StreakUpdatedEvent,
    LeaguePointsAddedEvent,
    LeaguePromotedEvent,
    QuestClaimedEvent,
)

__all__ = [
    "EventStore",
    "BaseEvent",
    "LessonCompletedEvent",
    "LessonFailedEvent",
    "RewardGrantedEvent",
    "StreakUpdatedEvent",
    "LeaguePointsAddedEvent",
    "LeaguePromotedEvent",
    "QuestClaimedEvent",
]
