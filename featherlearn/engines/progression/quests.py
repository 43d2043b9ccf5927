"""
Quest / Achievement Evaluator.

Quests are declared in code and evaluated against a snapshot of the user's
metrics; nothing about a quest's progress is stored. Only claims persist.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from featherlearn.engines.progression.scoring import round_half_up

LIFETIME_PERIOD = "lifetime"


class QuestCadence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    ACHIEVEMENT = "achievement"


class QuestMetric(str, Enum):
    LESSONS_TODAY = "lessons_today"
    PERFECT_SCORES_TODAY = "perfect_scores_today"
    MINUTES_TODAY = "minutes_today"
    LESSONS_THIS_WEEK = "lessons_this_week"
    PERFECT_SCORES_THIS_WEEK = "perfect_scores_this_week"
    LEAGUE_POINTS_THIS_WEEK = "league_points_this_week"
    CURRENT_STREAK = "current_streak"
    BEST_STREAK = "best_streak"
    LESSONS_TOTAL = "lessons_total"
    PERFECT_SCORES_TOTAL = "perfect_scores_total"
    PROMOTED = "promoted"
    FOLLOWING = "following"
    MINUTES_TOTAL = "minutes_total"


class QuestReward(BaseModel):
    xp: int
    feathers: int


class QuestDefinition(BaseModel):
    id: str
    title: str
    description: str
    cadence: QuestCadence
    metric: QuestMetric
    target: int
    reward: QuestReward
    icon: Optional[str] = None


class QuestMetrics(BaseModel):
    """Aggregates a quest can be measured against."""

    lessons_today: int = 0
    perfect_scores_today: int = 0
    minutes_today: int = 0
    lessons_this_week: int = 0
    perfect_scores_this_week: int = 0
    league_points_this_week: int = 0
    current_streak: int = 0
    best_streak: int = 0
    lessons_total: int = 0
    perfect_scores_total: int = 0
    promoted: int = 0
    following: int = 0
    minutes_total: int = 0

    def value(self, metric: QuestMetric) -> int:
        return getattr(self, metric.value)


class QuestStatus(BaseModel):
    id: str
    title: str
    description: str
    cadence: QuestCadence
    target: int
    progress: int
    percent: int
    completed: bool
    claimed: bool = False
    reward: QuestReward
    icon: Optional[str] = None


def _quest(id, title, description, cadence, metric, target, xp, feathers, icon=None):
    return QuestDefinition(
        id=id,
        title=title,
        description=description,
        cadence=cadence,
        metric=metric,
        target=target,
        reward=QuestReward(xp=xp, feathers=feathers),
        icon=icon,
    )


DAILY_QUESTS: List[QuestDefinition] = [
    _quest("complete_lessons", "Complete Lessons", "Complete 3 lessons today",
           QuestCadence.DAILY, QuestMetric.LESSONS_TODAY, 3, 50, 5),
    _quest("maintain_streak", "Maintain Streak", "Maintain your learning streak",
           QuestCadence.DAILY, QuestMetric.CURRENT_STREAK, 1, 30, 3),
    _quest("perfect_score", "Perfect Score", "Get a perfect score (100%) on any lesson",
           QuestCadence.DAILY, QuestMetric.PERFECT_SCORES_TODAY, 1, 100, 10),
    _quest("practice_time", "Practice Time", "Spend at least 15 minutes learning",
           QuestCadence.DAILY, QuestMetric.MINUTES_TODAY, 15, 40, 4),
]

WEEKLY_QUESTS: List[QuestDefinition] = [
    _quest("complete_lessons_week", "Weekly Learner", "Complete 15 lessons this week",
           QuestCadence.WEEKLY, QuestMetric.LESSONS_THIS_WEEK, 15, 200, 20),
    _quest("maintain_streak_week", "Streak Master", "Maintain a 7-day streak",
           QuestCadence.WEEKLY, QuestMetric.CURRENT_STREAK, 7, 300, 30),
    _quest("league_progress", "League Climber", "Earn 500 league points this week",
           QuestCadence.WEEKLY, QuestMetric.LEAGUE_POINTS_THIS_WEEK, 500, 250, 25),
    _quest("perfect_scores_week", "Perfectionist", "Get 5 perfect scores this week",
           QuestCadence.WEEKLY, QuestMetric.PERFECT_SCORES_THIS_WEEK, 5, 400, 40),
]

ACHIEVEMENTS: List[QuestDefinition] = [
    _quest("first_lesson", "First Steps", "Complete your first lesson",
           QuestCadence.ACHIEVEMENT, QuestMetric.LESSONS_TOTAL, 1, 50, 5, "🎯"),
    _quest("lesson_master", "Lesson Master", "Complete 50 lessons",
           QuestCadence.ACHIEVEMENT, QuestMetric.LESSONS_TOTAL, 50, 500, 50, "📚"),
    _quest("streak_7", "Week Warrior", "Maintain a 7-day streak",
           QuestCadence.ACHIEVEMENT, QuestMetric.BEST_STREAK, 7, 200, 20, "🔥"),
    _quest("streak_30", "Monthly Master", "Maintain a 30-day streak",
           QuestCadence.ACHIEVEMENT, QuestMetric.BEST_STREAK, 30, 1000, 100, "⚡"),
    _quest("perfect_score", "Perfect Score", "Get a perfect score on any lesson",
           QuestCadence.ACHIEVEMENT, QuestMetric.PERFECT_SCORES_TOTAL, 1, 100, 10, "⭐"),
    _quest("league_promotion", "League Promoter", "Get promoted to a higher league",
           QuestCadence.ACHIEVEMENT, QuestMetric.PROMOTED, 1, 300, 30, "🏆"),
    _quest("social_learner", "Social Learner", "Follow 10 other learners",
           QuestCadence.ACHIEVEMENT, QuestMetric.FOLLOWING, 10, 150, 15, "👥"),
    _quest("time_invested", "Time Investor", "Spend 10 hours learning",
           QuestCadence.ACHIEVEMENT, QuestMetric.MINUTES_TOTAL, 600, 400, 40, "⏰"),
]

CATALOGS: Dict[QuestCadence, List[QuestDefinition]] = {
    QuestCadence.DAILY: DAILY_QUESTS,
    QuestCadence.WEEKLY: WEEKLY_QUESTS,
    QuestCadence.ACHIEVEMENT: ACHIEVEMENTS,
}


def find_quest(quest_id: str, cadence: Optional[QuestCadence] = None) -> Optional[QuestDefinition]:
    """
    Look up a quest by id.

    "perfect_score" exists both as a daily quest and as an achievement; without
    a cadence the daily quest wins, matching catalog order.
    """
    cadences = [cadence] if cadence else list(CATALOGS)
    for c in cadences:
        for quest in CATALOGS[c]:
            if quest.id == quest_id:
                return quest
    return None


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_key(cadence: QuestCadence, today: date) -> str:
    if cadence == QuestCadence.DAILY:
        return today.isoformat()
    if cadence == QuestCadence.WEEKLY:
        return week_start(today).isoformat()
    return LIFETIME_PERIOD


class QuestEvaluator:
    """Stateless evaluation of quest definitions against metrics."""

    @classmethod
    def evaluate(
        cls,
        quest: QuestDefinition,
        metrics: QuestMetrics,
        claimed: bool = False,
    ) -> QuestStatus:
        current = max(0, metrics.value(quest.metric))
        progress = min(current, quest.target)
        return QuestStatus(
            id=quest.id,
            title=quest.title,
            description=quest.description,
            cadence=quest.cadence,
            target=quest.target,
            progress=progress,
            percent=round_half_up(100 * progress, quest.target),
            completed=current >= quest.target,
            claimed=claimed,
            reward=quest.reward,
            icon=quest.icon,
        )

    @classmethod
    def evaluate_all(
        cls,
        quests: Iterable[QuestDefinition],
        metrics: QuestMetrics,
        claimed_ids: Iterable[str] = (),
    ) -> List[QuestStatus]:
        claimed = set(claimed_ids)
        return [cls.evaluate(q, metrics, q.id in claimed) for q in quests]
