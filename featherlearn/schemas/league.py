"""
League schemas.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from featherlearn.engines.progression.league import TierSpec
from featherlearn.engines.progression.league_service import LeaderboardEntry, LeagueStatus
from featherlearn.schemas.common import Pagination
from featherlearn.schemas.lesson import PointsUpdateResponse


class TierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = ""
    level: int = Field(..., ge=1)
    min_points: int = Field(..., ge=0)
    max_points: Optional[int] = Field(None, gt=0)
    weekly_xp_reward: int = Field(0, ge=0)
    weekly_feather_reward: int = Field(0, ge=0)
    promotion_xp_reward: int = Field(0, ge=0)
    promotion_feather_reward: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _range(self):
        if self.max_points is not None and self.max_points <= self.min_points:
            raise ValueError("max_points must be greater than min_points")
        return self

    def to_spec(self) -> TierSpec:
        return TierSpec(**self.model_dump())


class TierUpdate(BaseModel):
    """Partial tier change; ``max_points`` may be set to null to open the range."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    level: Optional[int] = Field(None, ge=1)
    min_points: Optional[int] = Field(None, ge=0)
    max_points: Optional[int] = Field(None, gt=0)
    weekly_xp_reward: Optional[int] = Field(None, ge=0)
    weekly_feather_reward: Optional[int] = Field(None, ge=0)
    promotion_xp_reward: Optional[int] = Field(None, ge=0)
    promotion_feather_reward: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def _values(self):
        for field in self.model_fields_set - {"max_points"}:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if (
            self.min_points is not None
            and self.max_points is not None
            and self.max_points <= self.min_points
        ):
            raise ValueError("max_points must be greater than min_points")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TierResponse(TierSpec):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[uuid.UUID] = None


class TierListResponse(BaseModel):
    tiers: List[TierResponse]


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]
    user_rank: Optional[int] = None
    pagination: Pagination


class FriendsLeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]
    user_rank: int
    total_friends: int


class UpdatePointsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Negative values reach the ledger and come back as invalid_points
    points: int


class UpdatePointsResponse(PointsUpdateResponse):
    message: str


LeagueStatusResponse = LeagueStatus
