"""
Pydantic schemas for API request/response validation.
"""

from featherlearn.schemas.common import (
    SuccessResponse,
    Pagination,
    HealthResponse,
)
from featherlearn.schemas.user import (
    UserPublic,
    UserResponse,
    ProfileUpdate,
    SettingsUpdate,
    UserStatsResponse,
    UserProfileResponse,
    UserListResponse,
    ActivityItem,
)
from featherlearn.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
)
from featherlearn.schemas.lesson import (
    ExerciseCreate,
    ExerciseResponse,
    LessonCreate,
    LessonUpdate,
    LessonSummary,
    LessonResponse,
    LessonDetailResponse,
    LessonListResponse,
    ProgressResponse,
    ProgressWithLesson,
    SubmitRequest,
    SubmitResponse,
)
from featherlearn.schemas.progress import (
    ProgressListResponse,
    ProgressOverviewResponse,
    ProgressStatsResponse,
)
from featherlearn.schemas.league import (
    TierCreate,
    TierUpdate,
    TierResponse,
    LeaderboardResponse,
    FriendsLeaderboardResponse,
    LeagueStatusResponse,
    UpdatePointsRequest,
    UpdatePointsResponse,
)
from featherlearn.schemas.quest import (
    ClaimResponse,
    AchievementBoard,
    QuestBoardResponse,
    QuestSummaryResponse,
)

__all__ = [
    # Common
    "SuccessResponse",
    "Pagination",
    "HealthResponse",
    # Users / auth
    "UserPublic",
    "UserResponse",
    "ProfileUpdate",
    "SettingsUpdate",
    "UserStatsResponse",
    "UserProfileResponse",
    "UserListResponse",
    "ActivityItem",
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    # Lessons
    "ExerciseCreate",
    "ExerciseResponse",
    "LessonCreate",
    "LessonUpdate",
    "LessonSummary",
    "LessonResponse",
    "LessonDetailResponse",
    "LessonListResponse",
    "ProgressResponse",
    "ProgressWithLesson",
    "SubmitRequest",
    "SubmitResponse",
    # Progress
    "ProgressListResponse",
    "ProgressOverviewResponse",
    "ProgressStatsResponse",
    # Leagues
    "TierCreate",
    "TierUpdate",
    "TierResponse",
    "LeaderboardResponse",
    "FriendsLeaderboardResponse",
    "LeagueStatusResponse",
    "UpdatePointsRequest",
    "UpdatePointsResponse",
    # Quests
    "ClaimResponse",
    "AchievementBoard",
    "QuestBoardResponse",
    "QuestSummaryResponse",
]
