"""
User profile, settings and social endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, Request

from featherlearn.api.deps import DbSession, CurrentUser, get_client_ip
from featherlearn.engines.progression.league_service import LeagueService
from featherlearn.engines.progression.progress_service import ProgressService
from featherlearn.engines.progression.social_service import SocialService
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.identity.identity_service import IdentityService
from featherlearn.kernel.models.event_log import EventType
from featherlearn.schemas.common import SuccessResponse
from featherlearn.schemas.user import (
    ActivityItem,
    ProfileUpdate,
    SettingsUpdate,
    UserListResponse,
    UserProfileResponse,
    UserPublic,
    UserResponse,
    UserStatsResponse,
)

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(user: CurrentUser):
    """Get the current user's full profile."""
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: Request,
    data: ProfileUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Update name, email, bio or avatar. Omitted fields are left alone."""
    updated = await IdentityService(db).update_profile(
        user,
        data.model_dump(exclude_unset=True),
        ip_address=get_client_ip(request),
    )
    return UserResponse.model_validate(updated)


@router.put("/settings", response_model=UserResponse)
async def update_settings(
    data: SettingsUpdate,
    user: CurrentUser,
    db: DbSession,
):
    """Merge notification, sound, language and theme preferences."""
    updated = await IdentityService(db).update_settings(user, data.model_dump(exclude_unset=True))
    return UserResponse.model_validate(updated)


@router.get("/stats", response_model=UserStatsResponse)
async def get_stats(user: CurrentUser, db: DbSession):
    """Lifetime totals, follow counts and global rank."""
    overall = await ProgressService(db).overall_stats(user.id)
    followers, following = await SocialService(db).counts(user.id)
    rank = await LeagueService(db).rank_of(user)

    return UserStatsResponse(
        user=UserResponse.model_validate(user),
        total_lessons=overall.total_lessons,
        average_score=overall.average_score,
        total_time_spent=overall.total_time_spent,
        total_xp_earned=overall.total_xp_earned,
        total_feathers_earned=overall.total_feathers_earned,
        followers=followers,
        following=following,
        rank=rank,
    )


@router.get("/activity", response_model=list[ActivityItem])
async def get_activity(
    user: CurrentUser,
    db: DbSession,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    event_type: Optional[EventType] = None,
):
    """The user's own audit trail, newest first."""
    events = await EventStore(db).get_user_activity(
        user.id,
        event_types=[event_type] if event_type else None,
        limit=limit,
        offset=offset,
    )
    return [ActivityItem.model_validate(e) for e in events]


@router.get("/search", response_model=UserListResponse)
async def search_users(
    user: CurrentUser,
    db: DbSession,
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(20, ge=1, le=50),
):
    """Find other learners by name or email."""
    users = await SocialService(db).search(user, q, limit)
    return UserListResponse(users=[UserPublic.model_validate(u) for u in users], total=len(users))


@router.get("/followers", response_model=UserListResponse)
async def list_followers(user: CurrentUser, db: DbSession):
    users = await SocialService(db).followers(user.id)
    return UserListResponse(users=[UserPublic.model_validate(u) for u in users], total=len(users))


@router.get("/following", response_model=UserListResponse)
async def list_following(user: CurrentUser, db: DbSession):
    users = await SocialService(db).following(user.id)
    return UserListResponse(users=[UserPublic.model_validate(u) for u in users], total=len(users))


@router.delete("/account", response_model=SuccessResponse)
async def delete_account(request: Request, user: CurrentUser, db: DbSession):
    """Delete the account along with its progress, follows and claims."""
    await IdentityService(db).delete_user(user, ip_address=get_client_ip(request))
    return SuccessResponse(message="Account deleted successfully")


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user(user_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Public profile of another learner."""
    target = await IdentityService(db).require_user(user_id)
    social = SocialService(db)
    followers, following = await social.counts(target.id)
    overall = await ProgressService(db).overall_stats(target.id)

    return UserProfileResponse(
        user=UserPublic.model_validate(target),
        followers=followers,
        following=following,
        is_following=await social.is_following(user.id, target.id),
        total_lessons=overall.total_lessons,
    )


@router.post("/{user_id}/follow", response_model=SuccessResponse)
async def follow_user(user_id: uuid.UUID, user: CurrentUser, db: DbSession):
    target = await SocialService(db).follow(user, user_id)
    return SuccessResponse(message=f"You are now following {target.name}")


@router.delete("/{user_id}/follow", response_model=SuccessResponse)
async def unfollow_user(user_id: uuid.UUID, user: CurrentUser, db: DbSession):
    await SocialService(db).unfollow(user, user_id)
    return SuccessResponse(message="Unfollowed successfully")
