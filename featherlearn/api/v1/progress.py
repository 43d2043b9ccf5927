"""
Progress endpoints: overview, completed / in-progress lists, stats and streak.
"""

from typing import Optional

from fastapi import APIRouter, Query

from featherlearn.api.deps import DbSession, CurrentUser
from featherlearn.engines.progression.progress_service import ProgressService
from featherlearn.kernel.models.progress import ProgressStatus
from featherlearn.schemas.common import Pagination
from featherlearn.schemas.lesson import ProgressWithLesson
from featherlearn.schemas.progress import (
    OverviewStats,
    ProgressListResponse,
    ProgressOverviewResponse,
    ProgressStatsResponse,
    StreakResponse,
)

router = APIRouter()


async def _page(
    service: ProgressService,
    user_id,
    status: Optional[str],
    page: int,
    limit: int,
) -> ProgressListResponse:
    rows, total = await service.list_progress(user_id, status=status, page=page, limit=limit)
    return ProgressListResponse(
        progress=[ProgressWithLesson.model_validate(r) for r in rows],
        pagination=Pagination.create(page, limit, total),
    )


@router.get("", response_model=ProgressOverviewResponse)
async def get_overview(
    user: CurrentUser,
    db: DbSession,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """All progress records plus lifetime completion stats."""
    service = ProgressService(db)
    listing = await _page(service, user.id, status, page, limit)
    overall = await service.overall_stats(user.id)

    return ProgressOverviewResponse(
        progress=listing.progress,
        pagination=listing.pagination,
        stats=OverviewStats(
            **overall.model_dump(),
            current_level=user.level,
            current_streak=service.live_streak(user),
            current_league=user.league,
        ),
    )


@router.get("/completed", response_model=ProgressListResponse)
async def get_completed(
    user: CurrentUser,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    return await _page(ProgressService(db), user.id, ProgressStatus.COMPLETED.value, page, limit)


@router.get("/in-progress", response_model=ProgressListResponse)
async def get_in_progress(
    user: CurrentUser,
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    return await _page(ProgressService(db), user.id, ProgressStatus.IN_PROGRESS.value, page, limit)


@router.get("/stats", response_model=ProgressStatsResponse)
async def get_stats(
    user: CurrentUser,
    db: DbSession,
    period: str = Query("all", pattern="^(week|month|year|all)$"),
):
    """Completion stats for a period, broken down by type, category and day."""
    return await ProgressService(db).stats(user, period)


@router.get("/streak", response_model=StreakResponse)
async def get_streak(user: CurrentUser, db: DbSession):
    """Current and longest streak with the last 30 days of activity."""
    return await ProgressService(db).streak_info(user)
