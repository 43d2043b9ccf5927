"""
League endpoints: ladder, standing, leaderboards and point updates.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, status

from featherlearn.api.deps import DbSession, CurrentUser, AdminUser
from featherlearn.engines.progression.league_service import LeagueService
from featherlearn.schemas.common import Pagination, SuccessResponse
from featherlearn.schemas.league import (
    FriendsLeaderboardResponse,
    LeaderboardResponse,
    LeagueStatusResponse,
    TierCreate,
    TierListResponse,
    TierResponse,
    TierUpdate,
    UpdatePointsRequest,
    UpdatePointsResponse,
)

router = APIRouter()


@router.get("", response_model=TierListResponse)
async def list_tiers(db: DbSession):
    """The configured ladder, lowest tier first."""
    tiers = await LeagueService(db).list_tiers()
    return TierListResponse(tiers=[TierResponse.model_validate(t) for t in tiers])


@router.post("", response_model=TierResponse, status_code=status.HTTP_201_CREATED)
async def create_tier(data: TierCreate, admin: AdminUser, db: DbSession):
    """Add a tier (admin only). Ranges may not overlap and may not leave a gap."""
    tier = await LeagueService(db).create_tier(data.to_spec(), actor_id=admin.id)
    return TierResponse.model_validate(tier)


@router.patch("/{tier_id}", response_model=TierResponse)
async def update_tier(tier_id: uuid.UUID, data: TierUpdate, admin: AdminUser, db: DbSession):
    """Edit a tier (admin only). The ladder must stay contiguous from 0."""
    tier = await LeagueService(db).update_tier(tier_id, data.changes(), actor_id=admin.id)
    return TierResponse.model_validate(tier)


@router.delete("/{tier_id}", response_model=SuccessResponse)
async def delete_tier(tier_id: uuid.UUID, admin: AdminUser, db: DbSession):
    """Remove a tier (admin only) when the rest of the ladder stays contiguous."""
    await LeagueService(db).delete_tier(tier_id, actor_id=admin.id)
    return SuccessResponse(message="League tier deleted")


@router.get("/current", response_model=LeagueStatusResponse)
async def current_league(user: CurrentUser, db: DbSession):
    """The caller's tier, progress toward the next one and ranks."""
    return await LeagueService(db).status(user)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    user: CurrentUser,
    db: DbSession,
    league: Optional[str] = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
):
    """Active users ordered by league points, then XP."""
    entries, total, user_rank = await LeagueService(db).leaderboard(user, league, page, limit)
    return LeaderboardResponse(
        leaderboard=entries,
        user_rank=user_rank,
        pagination=Pagination.create(page, limit, total),
    )


@router.get("/friends", response_model=FriendsLeaderboardResponse)
async def friends_leaderboard(
    user: CurrentUser,
    db: DbSession,
    limit: int = Query(20, ge=1, le=100),
):
    """The caller and everyone they follow."""
    entries, user_rank, total_friends = await LeagueService(db).friends_leaderboard(user, limit)
    return FriendsLeaderboardResponse(
        leaderboard=entries,
        user_rank=user_rank,
        total_friends=total_friends,
    )


@router.post("/update-points", response_model=UpdatePointsResponse)
async def update_points(data: UpdatePointsRequest, user: CurrentUser, db: DbSession):
    """
    Add league points to the caller, promoting them when they cross a
    tier boundary. Negative amounts are rejected.
    """
    update = await LeagueService(db).add_points(user.id, data.points)
    message = f"Promoted to {update.new_league}!" if update.promoted else "League points updated"
    return UpdatePointsResponse(message=message, **update.model_dump())
