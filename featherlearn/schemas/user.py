"""
User profile, settings and social schemas.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from featherlearn.kernel.models.base import enum_value


class UserPublic(BaseModel):
    """What other learners can see."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    bio: Optional[str] = None
    profile_uri: Optional[str] = None
    level: int
    xp: int
    streak: int
    league: str
    league_points: int


class UserResponse(UserPublic):
    """Own profile, including private fields."""

    email: str
    role: str
    is_active: bool
    feathers: int
    streak_level: int
    streak_freeze: int
    streak_goal: int
    last_lesson_date: Optional[date] = None
    league_week: int
    settings: Dict[str, Any]
    created_at: datetime
    last_active_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, v):
        return enum_value(v)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    profile_uri: Optional[str] = Field(None, max_length=500)


class SettingsUpdate(BaseModel):
    notifications: Optional[bool] = None
    sound: Optional[bool] = None
    language: Optional[Literal["en", "es", "fr", "de", "pt"]] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None


class UserStatsResponse(BaseModel):
    user: UserResponse
    total_lessons: int
    average_score: float
    total_time_spent: int
    total_xp_earned: int
    total_feathers_earned: int
    followers: int
    following: int
    rank: int


class UserProfileResponse(BaseModel):
    user: UserPublic
    followers: int
    following: int
    is_following: bool
    total_lessons: int


class UserListResponse(BaseModel):
    users: List[UserPublic]
    total: int


class ActivityItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    event_type: str
    entity_type: str
    entity_id: uuid.UUID
    payload: Dict[str, Any]
    created_at: datetime

    @field_validator("event_type", mode="before")
    @classmethod
    def _event_type(cls, v):
        return enum_value(v)
