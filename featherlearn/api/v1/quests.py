"""
Quest and achievement endpoints.
"""

from typing import Optional

from fastapi import APIRouter

from featherlearn.api.deps import DbSession, CurrentUser
from featherlearn.engines.progression.quest_service import QuestService
from featherlearn.engines.progression.quests import QuestCadence
from featherlearn.schemas.quest import (
    AchievementBoard,
    ClaimResponse,
    QuestBoardResponse,
    QuestSummaryResponse,
)

router = APIRouter()


@router.get("/daily", response_model=QuestBoardResponse)
async def daily_quests(user: CurrentUser, db: DbSession):
    """Today's quests, evaluated against today's activity."""
    return await QuestService(db).board(user, QuestCadence.DAILY)


@router.get("/weekly", response_model=QuestBoardResponse)
async def weekly_quests(user: CurrentUser, db: DbSession):
    return await QuestService(db).board(user, QuestCadence.WEEKLY)


@router.get("/achievements", response_model=AchievementBoard)
async def achievements(user: CurrentUser, db: DbSession):
    board = await QuestService(db).board(user, QuestCadence.ACHIEVEMENT)
    percentage = round(100 * board.completed_count / board.total) if board.total else 0
    return AchievementBoard(**board.model_dump(), completion_percentage=percentage)


@router.post("/claim/{quest_id}", response_model=ClaimResponse)
async def claim_quest(
    quest_id: str,
    user: CurrentUser,
    db: DbSession,
    cadence: Optional[QuestCadence] = None,
):
    """
    Collect a completed quest's reward, once per period.

    ``cadence`` picks between quests that share an id across catalogs.
    """
    result = await QuestService(db).claim(user, quest_id, cadence)
    return ClaimResponse(message="Quest reward claimed successfully!", **result.model_dump())


@router.get("/summary", response_model=QuestSummaryResponse)
async def quest_summary(user: CurrentUser, db: DbSession):
    """Today's activity next to lifetime totals."""
    return await QuestService(db).summary(user)
