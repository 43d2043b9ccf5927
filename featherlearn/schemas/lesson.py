"""
Lesson, exercise and submission schemas.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from featherlearn.kernel.models.base import enum_value
from featherlearn.kernel.models.lesson import ExerciseType, LessonCategory, LessonType


class ExerciseCreate(BaseModel):
    exercise_type: ExerciseType
    question: str = Field(..., min_length=1)
    options: List[str] = Field(default_factory=list)
    correct_answer: str = Field(..., min_length=1)
    explanation: Optional[str] = None
    points: int = Field(10, ge=1)


class ExerciseResponse(BaseModel):
    """Exercise as shown to a learner; the answer is not included."""

    model_config = ConfigDict(from_attributes=True)

    position: int
    exercise_type: str
    question: str
    options: List[str]
    points: int

    @field_validator("exercise_type", mode="before")
    @classmethod
    def _type(cls, v):
        return enum_value(v)


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    content: Dict[str, Any] = Field(default_factory=dict)
    lesson_type: LessonType
    category: LessonCategory
    difficulty: int = Field(1, ge=1, le=5)
    estimated_duration: int = Field(5, ge=1)
    language: str = Field("en", max_length=10)
    tags: List[str] = Field(default_factory=list)
    xp_reward: int = Field(50, ge=0)
    feather_reward: int = Field(5, ge=0)
    prerequisites: List[uuid.UUID] = Field(default_factory=list)
    is_premium: bool = False
    exercises: List[ExerciseCreate] = Field(..., min_length=1)


class LessonUpdate(BaseModel):
    """Metadata changes only; exercises are fixed once a lesson exists."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    content: Optional[Dict[str, Any]] = None
    lesson_type: Optional[LessonType] = None
    category: Optional[LessonCategory] = None
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    estimated_duration: Optional[int] = Field(None, ge=1)
    language: Optional[str] = Field(None, max_length=10)
    tags: Optional[List[str]] = None
    xp_reward: Optional[int] = Field(None, ge=0)
    feather_reward: Optional[int] = Field(None, ge=0)
    prerequisites: Optional[List[uuid.UUID]] = None
    is_premium: Optional[bool] = None
    is_active: Optional[bool] = None


class LessonSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str
    lesson_type: str
    category: str
    difficulty: int
    estimated_duration: int
    language: str
    tags: List[str]
    xp_reward: int
    feather_reward: int
    is_premium: bool
    created_at: datetime

    @field_validator("lesson_type", "category", mode="before")
    @classmethod
    def _enum(cls, v):
        return enum_value(v)


class LessonResponse(LessonSummary):
    content: Dict[str, Any]
    prerequisites: List[str]
    exercises: List[ExerciseResponse]


class ExerciseResultResponse(BaseModel):
    exercise_index: int
    is_correct: bool
    user_answer: str
    correct_answer: str
    time_spent: int = 0
    points: int


class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lesson_id: uuid.UUID
    status: str
    score: int
    mistakes: int
    time_spent: int
    exercise_results: List[ExerciseResultResponse]
    xp_earned: int
    feathers_earned: int
    league_points_earned: int
    streak_maintained: bool
    attempts: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return enum_value(v)


class ProgressWithLesson(ProgressResponse):
    lesson: LessonSummary


class LessonDetailResponse(BaseModel):
    lesson: LessonResponse
    progress: Optional[ProgressResponse] = None


class LessonListResponse(BaseModel):
    lessons: List[LessonSummary]
    total: int
    page: int
    limit: int
    pages: int


class AnswerIn(BaseModel):
    exercise_index: int = Field(..., ge=0)
    user_answer: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("user_answer", "answer")
    )
    time_spent: int = Field(0, ge=0)


class SubmitRequest(BaseModel):
    answers: List[AnswerIn]
    time_spent: Optional[int] = Field(None, ge=0)


class RewardResponse(BaseModel):
    xp: int
    feathers: int
    total_xp: int
    total_feathers: int
    level: int
    leveled_up: bool


class StreakResponse(BaseModel):
    streak: int
    change: str
    maintained: bool


class PointsUpdateResponse(BaseModel):
    old_league: str
    new_league: str
    old_points: int
    new_points: int
    points_gained: int
    promoted: bool
    league_week: int


class SubmitResponse(BaseModel):
    message: str
    score: int
    correct_answers: int
    total_exercises: int
    is_completed: bool
    rewards: Optional[RewardResponse] = None
    streak: Optional[StreakResponse] = None
    league: Optional[PointsUpdateResponse] = None
    progress: ProgressResponse
