"""
Progress listing and statistics schemas.
"""

from typing import List

from pydantic import BaseModel

from featherlearn.engines.progression.progress_service import (
    CompletionStats,
    ProgressStats,
    StreakInfo,
)
from featherlearn.schemas.common import Pagination
from featherlearn.schemas.lesson import ProgressWithLesson


class OverviewStats(CompletionStats):
    current_level: int
    current_streak: int
    current_league: str


class ProgressListResponse(BaseModel):
    progress: List[ProgressWithLesson]
    pagination: Pagination


class ProgressOverviewResponse(ProgressListResponse):
    stats: OverviewStats


ProgressStatsResponse = ProgressStats
StreakResponse = StreakInfo
