"""
Event payload definitions using Pydantic for validation.

These are the payload schemas for reward-bearing events in the audit trail.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BaseEvent(BaseModel):
    """Base event payload structure."""

    model_config = ConfigDict(extra="allow")


class LessonCompletedEvent(BaseEvent):
    lesson_id: uuid.UUID
    score: int
    correct_answers: int
    total_exercises: int
    attempts: int
    time_spent: int


class LessonFailedEvent(BaseEvent):
    lesson_id: uuid.UUID
    score: int
    threshold: int
    attempts: int


class RewardGrantedEvent(BaseEvent):
    """XP / feather grant from a lesson or a quest claim."""

    source: str  # "lesson" or "quest"
    xp: int
    feathers: int
    total_xp: int
    total_feathers: int
    old_level: int
    new_level: int
    quest_id: Optional[str] = None


class StreakUpdatedEvent(BaseEvent):
    old_streak: int
    new_streak: int
    change: str  # extended / reset / unchanged
    day: str


class LeaguePointsAddedEvent(BaseEvent):
    points_gained: int
    old_points: int
    new_points: int
    old_league: str
    new_league: str
    league_week: int


class LeaguePromotedEvent(BaseEvent):
    old_league: str
    new_league: str
    league_points: int


class QuestClaimedEvent(BaseEvent):
    quest_id: str
    period_key: str
    xp: int
    feathers: int
