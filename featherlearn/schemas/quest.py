"""
Quest schemas.
"""

from featherlearn.engines.progression.quest_service import ClaimResult, QuestBoard, QuestSummary


class ClaimResponse(ClaimResult):
    message: str


class AchievementBoard(QuestBoard):
    completion_percentage: int


QuestBoardResponse = QuestBoard
QuestSummaryResponse = QuestSummary
