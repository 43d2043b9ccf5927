"""
Progression Engine - scoring, rewards, streaks, leagues and quests.

Pure rule modules:
- scoring: answers -> score (round-half-up over the lesson's exercise count)
- rewards: score -> XP / feathers, XP -> level
- streak: consecutive-day streak transitions on calendar dates
- league: ladder lookup, point additions, promotion, ladder validation
- quests: declarative daily / weekly / achievement catalogs

DB-backed services apply those rules inside the request transaction.
"""

from featherlearn.engines.progression.scoring import (
    AnswerSubmission,
    ExerciseResult,
    Scorer,
    ScoreResult,
    round_half_up,
)
from featherlearn.engines.progression.rewards import RewardEngine, RewardGrant, RewardOutcome
from featherlearn.engines.progression.streak import (
    StreakChange,
    StreakUpdate,
    advance_streak,
    local_today,
    longest_streak,
)
from featherlearn.engines.progression.league import (
    DEFAULT_LADDER,
    LeagueLadder,
    PointsUpdate,
    TierSpec,
    add_points,
    validate_ladder,
)
from featherlearn.engines.progression.quests import (
    ACHIEVEMENTS,
    DAILY_QUESTS,
    WEEKLY_QUESTS,
    QuestCadence,
    QuestEvaluator,
    QuestMetrics,
    QuestStatus,
)
from featherlearn.engines.progression.ledger import ProgressionLedger
from featherlearn.engines.progression.lesson_service import LessonService, SubmissionOutcome
from featherlearn.engines.progression.progress_service import ProgressService
from featherlearn.engines.progression.league_service import LeagueService, seed_league_tiers
from featherlearn.engines.progression.quest_service import QuestService
from featherlearn.engines.progression.social_service import SocialService

__all__ = [
    "AnswerSubmission",
    "ExerciseResult",
    "Scorer",
    "ScoreResult",
    "round_half_up",
    "RewardEngine",
    "RewardGrant",
    "RewardOutcome",
    "StreakChange",
    "StreakUpdate",
    "advance_streak",
    "local_today",
    "longest_streak",
    "DEFAULT_LADDER",
    "LeagueLadder",
    "PointsUpdate",
    "TierSpec",
    "add_points",
    "validate_ladder",
    "ACHIEVEMENTS",
    "DAILY_QUESTS",
    "WEEKLY_QUESTS",
    "QuestCadence",
    "QuestEvaluator",
    "QuestMetrics",
    "QuestStatus",
    "ProgressionLedger",
    "LessonService",
    "SubmissionOutcome",
    "ProgressService",
    "LeagueService",
    "seed_league_tiers",
    "QuestService",
    "SocialService",
]
