"""
Lesson Service - lesson catalogue, starts and the submission pipeline (DB-backed).

``submit_lesson`` is the one place a lesson attempt turns into rewards:
score the answers, decide completion, then (inside the request's
transaction) grant XP/feathers, move the streak and add league points.
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from featherlearn.config import Settings, get_settings
from featherlearn.engines.progression.ledger import ProgressionLedger
from featherlearn.engines.progression.league import PointsUpdate
from featherlearn.engines.progression.rewards import RewardEngine, RewardGrant
from featherlearn.engines.progression.scoring import AnswerSubmission, Scorer
from featherlearn.engines.progression.streak import StreakUpdate
from featherlearn.kernel.errors import (
    AlreadyCompleted,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.events.event_types import LessonCompletedEvent, LessonFailedEvent
from featherlearn.kernel.models.base import enum_value, utcnow
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.models.lesson import Exercise, Lesson, LessonCategory
from featherlearn.kernel.models.progress import LessonProgress, ProgressStatus
from featherlearn.kernel.models.user import User
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)

SORT_COLUMNS = {
    "created_at": Lesson.created_at.desc(),
    "difficulty": Lesson.difficulty.asc(),
    "duration": Lesson.estimated_duration.asc(),
    "title": Lesson.title.asc(),
}


class SubmissionOutcome(BaseModel):
    """Everything a submission changed."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    score: int
    correct_answers: int
    total_exercises: int
    is_completed: bool
    rewards: Optional[RewardGrant] = None
    streak: Optional[StreakUpdate] = None
    league: Optional[PointsUpdate] = None
    progress: LessonProgress


class LessonService:
    """Lesson reads/writes and the per-user lesson lifecycle."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.ledger = ProgressionLedger(session, self.settings)
        self.event_store = EventStore(session)

    # Catalogue

    async def get_lesson(self, lesson_id: uuid.UUID, include_inactive: bool = False) -> Lesson:
        lesson = await self.session.get(Lesson, lesson_id)
        if lesson is None or (not lesson.is_active and not include_inactive):
            raise NotFoundError("Lesson not found")
        return lesson

    async def list_lessons(
        self,
        lesson_type: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[int] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        page: int = 1,
        limit: int = 20,
    ) -> tuple[List[Lesson], int]:
        """Active lessons matching the filters, one page at a time."""
        conditions = [Lesson.is_active.is_(True)]
        if lesson_type:
            conditions.append(Lesson.lesson_type == lesson_type)
        if category:
            conditions.append(Lesson.category == category)
        if difficulty is not None:
            conditions.append(Lesson.difficulty == difficulty)
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(or_(Lesson.title.ilike(pattern), Lesson.description.ilike(pattern)))

        total = (
            await self.session.execute(select(func.count(Lesson.id)).where(*conditions))
        ).scalar() or 0

        order = SORT_COLUMNS.get(sort, SORT_COLUMNS["created_at"])
        query = (
            select(Lesson)
            .where(*conditions)
            .order_by(order, Lesson.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def create_lesson(
        self,
        data: Dict[str, Any],
        exercises: Sequence[Dict[str, Any]],
        created_by: Optional[uuid.UUID] = None,
    ) -> Lesson:
        """
        Create a lesson with its exercises in the given order.

        Raises:
            ValidationError: No exercises, or a prerequisite that does not exist
        """
        if not exercises:
            raise ValidationError("A lesson needs at least one exercise", code="empty_lesson")

        prerequisites = await self._check_prerequisites(data.get("prerequisites"))

        lesson = Lesson(
            **{k: v for k, v in data.items() if k != "prerequisites"},
            prerequisites=prerequisites,
            created_by=created_by,
        )
        lesson.exercises = [
            Exercise(position=position, **exercise)
            for position, exercise in enumerate(exercises)
        ]
        self.session.add(lesson)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.LESSON_CREATED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=created_by,
            payload={"title": lesson.title, "exercises": len(exercises)},
        )
        logger.info("Lesson created", extra={"lesson_id": str(lesson.id)})
        return lesson

    async def update_lesson(
        self,
        lesson_id: uuid.UUID,
        changes: Dict[str, Any],
        actor_id: Optional[uuid.UUID] = None,
    ) -> Lesson:
        """
        Change lesson metadata. Exercises cannot be edited through here.

        Inactive lessons can be updated too, which is how one is re-activated.

        Raises:
            NotFoundError: No such lesson
            ValidationError: Unknown prerequisite, or the lesson listed as its own
        """
        lesson = await self.get_lesson(lesson_id, include_inactive=True)
        if "prerequisites" in changes:
            if str(lesson.id) in {str(p) for p in changes["prerequisites"] or []}:
                raise ValidationError(
                    "A lesson cannot be its own prerequisite", code="invalid_prerequisite"
                )
            changes["prerequisites"] = await self._check_prerequisites(changes["prerequisites"])

        for field, value in changes.items():
            setattr(lesson, field, value)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.LESSON_UPDATED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=actor_id,
            payload={"fields": sorted(changes)},
        )
        logger.info("Lesson updated", extra={"lesson_id": str(lesson.id)})
        return lesson

    async def deactivate_lesson(
        self, lesson_id: uuid.UUID, actor_id: Optional[uuid.UUID] = None
    ) -> None:
        """Hide a lesson from learners. Progress and rewards already earned stay."""
        lesson = await self.get_lesson(lesson_id, include_inactive=True)
        if not lesson.is_active:
            return
        lesson.is_active = False
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.LESSON_DEACTIVATED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=actor_id,
            payload={"title": lesson.title},
        )
        logger.info("Lesson deactivated", extra={"lesson_id": str(lesson.id)})

    async def _check_prerequisites(self, prerequisites: Optional[Sequence[Any]]) -> List[str]:
        ids = [str(p) for p in prerequisites or []]
        if ids:
            found = await self.session.execute(
                select(func.count(Lesson.id)).where(Lesson.id.in_([uuid.UUID(p) for p in ids]))
            )
            if (found.scalar() or 0) != len(set(ids)):
                raise ValidationError("Unknown prerequisite lesson", code="unknown_prerequisite")
        return ids

    async def recommended_lessons(self, user: User, limit: int = 10) -> List[Lesson]:
        """
        Lessons near the user's level that they have not started or finished.

        Difficulty up to level + 1, beginner and intermediate categories only.
        """
        touched = select(LessonProgress.lesson_id).where(
            LessonProgress.user_id == user.id,
            LessonProgress.status.in_(
                [ProgressStatus.COMPLETED.value, ProgressStatus.IN_PROGRESS.value]
            ),
        )
        query = (
            select(Lesson)
            .where(
                Lesson.is_active.is_(True),
                Lesson.id.not_in(touched),
                Lesson.difficulty <= user.level + 1,
                Lesson.category.in_(
                    [LessonCategory.BEGINNER.value, LessonCategory.INTERMEDIATE.value]
                ),
            )
            .order_by(Lesson.difficulty.asc(), Lesson.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # Progress lifecycle

    async def get_progress(
        self, user_id: uuid.UUID, lesson_id: uuid.UUID
    ) -> Optional[LessonProgress]:
        result = await self.session.execute(
            select(LessonProgress).where(
                LessonProgress.user_id == user_id,
                LessonProgress.lesson_id == lesson_id,
            )
        )
        return result.scalar_one_or_none()

    async def _completed_lesson_ids(self, user_id: uuid.UUID, lesson_ids: List[str]) -> set[str]:
        if not lesson_ids:
            return set()
        result = await self.session.execute(
            select(LessonProgress.lesson_id).where(
                LessonProgress.user_id == user_id,
                LessonProgress.lesson_id.in_([uuid.UUID(i) for i in lesson_ids]),
                LessonProgress.status == ProgressStatus.COMPLETED.value,
            )
        )
        return {str(i) for i in result.scalars().all()}

    async def start_lesson(self, user: User, lesson_id: uuid.UUID) -> LessonProgress:
        """
        Mark a lesson in progress and count the attempt.

        Raises:
            NotFoundError: Unknown or inactive lesson
            ValidationError: Prerequisites not completed
            AlreadyCompleted: The lesson is already completed
        """
        lesson = await self.get_lesson(lesson_id)

        required = [str(p) for p in lesson.prerequisites or []]
        done = await self._completed_lesson_ids(user.id, required)
        if len(done) < len(set(required)):
            raise ValidationError(
                "You must complete the prerequisites first",
                code="prerequisites_incomplete",
            )

        progress = await self.get_progress(user.id, lesson.id)
        if progress is None:
            progress = LessonProgress(
                user_id=user.id,
                lesson_id=lesson.id,
                status=ProgressStatus.IN_PROGRESS,
                attempts=1,
                started_at=utcnow(),
            )
            self.session.add(progress)
        elif enum_value(progress.status) == ProgressStatus.COMPLETED.value:
            raise AlreadyCompleted()
        else:
            progress.status = ProgressStatus.IN_PROGRESS
            progress.attempts += 1
            progress.started_at = utcnow()

        await self._flush_progress()
        await self.event_store.log(
            event_type=EventType.LESSON_STARTED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=user.id,
            payload={"attempts": progress.attempts},
        )
        return progress

    async def submit_lesson(
        self,
        user: User,
        lesson_id: uuid.UUID,
        answers: Sequence[AnswerSubmission],
        time_spent: Optional[int] = None,
    ) -> SubmissionOutcome:
        """
        Score a submission and apply its rewards.

        Args:
            user: The submitting user
            lesson_id: Lesson being answered
            answers: Answers addressed by exercise index
            time_spent: Seconds spent; defaults to the sum of per-answer times

        Raises:
            NotFoundError: Unknown or inactive lesson
            AlreadyCompleted: Progress for this lesson is already completed
            ValidationError: Empty lesson, bad or repeated exercise index
            ConflictError: A concurrent submission changed the same progress
        """
        lesson = await self.get_lesson(lesson_id)

        progress = await self.get_progress(user.id, lesson.id)
        if progress is not None and enum_value(progress.status) == ProgressStatus.COMPLETED.value:
            raise AlreadyCompleted()

        scored = Scorer.score(answers, lesson.exercises)
        outcome = RewardEngine.evaluate(
            scored.score,
            lesson.xp_reward,
            lesson.feather_reward,
            threshold=self.settings.completion_threshold,
        )
        seconds = time_spent if time_spent is not None else sum(a.time_spent for a in answers)

        if progress is None:
            progress = LessonProgress(
                user_id=user.id,
                lesson_id=lesson.id,
                attempts=1,
                started_at=utcnow(),
            )
            self.session.add(progress)
        elif enum_value(progress.status) != ProgressStatus.IN_PROGRESS.value:
            # Retrying a failed lesson without calling start first
            progress.attempts += 1

        progress.status = outcome.status
        progress.score = scored.score
        progress.mistakes = scored.mistakes
        progress.exercise_results = [r.model_dump() for r in scored.results]
        progress.time_spent = (progress.time_spent or 0) + seconds
        await self._flush_progress()

        result = SubmissionOutcome(
            score=scored.score,
            correct_answers=scored.correct_answers,
            total_exercises=scored.total_exercises,
            is_completed=outcome.completed,
            progress=progress,
        )

        if not outcome.completed:
            await self.event_store.log_from_model(
                event_type=EventType.LESSON_FAILED,
                entity_type="lesson",
                entity_id=lesson.id,
                user_id=user.id,
                payload_model=LessonFailedEvent(
                    lesson_id=lesson.id,
                    score=scored.score,
                    threshold=self.settings.completion_threshold,
                    attempts=progress.attempts,
                ),
            )
            return result

        locked = await self.ledger.lock_user(user.id)
        grant = await self.ledger.grant_rewards(
            locked, outcome.xp, outcome.feathers, source="lesson", entity_id=lesson.id
        )
        streak = await self.ledger.record_streak(locked)
        league = await self.ledger.add_league_points(
            locked, outcome.xp * self.settings.league_points_per_xp
        )

        progress.completed_at = utcnow()
        progress.xp_earned = outcome.xp
        progress.feathers_earned = outcome.feathers
        progress.league_points_earned = league.points_gained
        progress.streak_maintained = streak.maintained
        await self._flush_progress()

        await self.event_store.log_from_model(
            event_type=EventType.LESSON_COMPLETED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=user.id,
            payload_model=LessonCompletedEvent(
                lesson_id=lesson.id,
                score=scored.score,
                correct_answers=scored.correct_answers,
                total_exercises=scored.total_exercises,
                attempts=progress.attempts,
                time_spent=progress.time_spent,
            ),
        )
        logger.info(
            "Lesson completed",
            extra={"lesson_id": str(lesson.id), "score": scored.score, "xp": outcome.xp},
        )

        result.rewards = grant
        result.streak = streak
        result.league = league
        return result

    async def reset_progress(self, user: User, lesson_id: uuid.UUID) -> None:
        """
        Delete the user's progress for a lesson.

        Rewards already granted stay with the user.
        """
        progress = await self.get_progress(user.id, lesson_id)
        if progress is None:
            raise NotFoundError("No progress found for this lesson")

        payload = {"previous_status": enum_value(progress.status), "score": progress.score}
        await self.session.delete(progress)
        await self.session.flush()
        await self.event_store.log(
            event_type=EventType.PROGRESS_RESET,
            entity_type="lesson",
            entity_id=lesson_id,
            user_id=user.id,
            payload=payload,
        )

    async def _flush_progress(self) -> None:
        """Flush, mapping lost races on the progress row to Conflict."""
        try:
            await self.session.flush()
        except StaleDataError as exc:
            raise ConflictError(
                "Progress was modified by another request", code="progress_conflict"
            ) from exc
        except IntegrityError as exc:
            raise ConflictError(
                "Progress for this lesson already exists", code="progress_conflict"
            ) from exc
