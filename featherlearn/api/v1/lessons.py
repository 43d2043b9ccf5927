"""
Lesson endpoints: catalogue admin, start, submit and per-lesson progress.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, status

from featherlearn.api.deps import DbSession, CurrentUser, AdminUser
from featherlearn.engines.progression.lesson_service import LessonService, SubmissionOutcome
from featherlearn.engines.progression.scoring import AnswerSubmission
from featherlearn.kernel.errors import NotFoundError
from featherlearn.kernel.models.lesson import LessonCategory, LessonType
from featherlearn.schemas.common import Pagination, SuccessResponse
from featherlearn.schemas.lesson import (
    LessonCreate,
    LessonDetailResponse,
    LessonListResponse,
    LessonResponse,
    LessonSummary,
    LessonUpdate,
    PointsUpdateResponse,
    ProgressResponse,
    RewardResponse,
    StreakResponse,
    SubmitRequest,
    SubmitResponse,
)

router = APIRouter()


def _submit_response(outcome: SubmissionOutcome) -> SubmitResponse:
    response = SubmitResponse(
        message="Lesson completed successfully!" if outcome.is_completed else "Lesson not passed, try again",
        score=outcome.score,
        correct_answers=outcome.correct_answers,
        total_exercises=outcome.total_exercises,
        is_completed=outcome.is_completed,
        progress=ProgressResponse.model_validate(outcome.progress),
    )
    if outcome.rewards is not None:
        response.rewards = RewardResponse(
            xp=outcome.rewards.xp_awarded,
            feathers=outcome.rewards.feathers_awarded,
            total_xp=outcome.rewards.new_xp,
            total_feathers=outcome.rewards.new_feathers,
            level=outcome.rewards.new_level,
            leveled_up=outcome.rewards.leveled_up,
        )
    if outcome.streak is not None:
        response.streak = StreakResponse(
            streak=outcome.streak.new_streak,
            change=outcome.streak.change.value,
            maintained=outcome.streak.maintained,
        )
    if outcome.league is not None:
        response.league = PointsUpdateResponse(**outcome.league.model_dump())
    return response


@router.get("", response_model=LessonListResponse)
async def list_lessons(
    user: CurrentUser,
    db: DbSession,
    lesson_type: Optional[LessonType] = Query(None, alias="type"),
    category: Optional[LessonCategory] = None,
    difficulty: Optional[int] = Query(None, ge=1, le=5),
    search: Optional[str] = Query(None, max_length=100),
    sort: str = Query("created_at", pattern="^(created_at|difficulty|duration|title)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List active lessons with filters, search and sorting."""
    lessons, total = await LessonService(db).list_lessons(
        lesson_type=lesson_type.value if lesson_type else None,
        category=category.value if category else None,
        difficulty=difficulty,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    pagination = Pagination.create(page, limit, total)
    return LessonListResponse(
        lessons=[LessonSummary.model_validate(lesson) for lesson in lessons],
        total=total,
        page=page,
        limit=limit,
        pages=pagination.pages,
    )


@router.get("/recommended", response_model=list[LessonSummary])
async def recommended_lessons(
    user: CurrentUser,
    db: DbSession,
    limit: int = Query(10, ge=1, le=50),
):
    """Lessons near the user's level that they have not touched yet."""
    lessons = await LessonService(db).recommended_lessons(user, limit)
    return [LessonSummary.model_validate(lesson) for lesson in lessons]


@router.post("", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(data: LessonCreate, admin: AdminUser, db: DbSession):
    """Create a lesson with its ordered exercises (admin only)."""
    fields = data.model_dump(exclude={"exercises"})
    exercises = [e.model_dump() for e in data.exercises]
    lesson = await LessonService(db).create_lesson(fields, exercises, created_by=admin.id)
    return LessonResponse.model_validate(lesson)


@router.get("/{lesson_id}", response_model=LessonDetailResponse)
async def get_lesson(lesson_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Lesson content with the caller's progress, if any."""
    service = LessonService(db)
    lesson = await service.get_lesson(lesson_id)
    progress = await service.get_progress(user.id, lesson.id)
    return LessonDetailResponse(
        lesson=LessonResponse.model_validate(lesson),
        progress=ProgressResponse.model_validate(progress) if progress else None,
    )


@router.patch("/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: uuid.UUID, data: LessonUpdate, admin: AdminUser, db: DbSession
):
    """Edit lesson metadata (admin only). Exercises cannot be changed."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    lesson = await LessonService(db).update_lesson(lesson_id, changes, actor_id=admin.id)
    return LessonResponse.model_validate(lesson)


@router.delete("/{lesson_id}", response_model=SuccessResponse)
async def delete_lesson(lesson_id: uuid.UUID, admin: AdminUser, db: DbSession):
    """Withdraw a lesson from the catalogue (admin only); learner history is kept."""
    await LessonService(db).deactivate_lesson(lesson_id, actor_id=admin.id)
    return SuccessResponse(message="Lesson deleted successfully")


@router.post("/{lesson_id}/start", response_model=ProgressResponse)
async def start_lesson(lesson_id: uuid.UUID, user: CurrentUser, db: DbSession):
    progress = await LessonService(db).start_lesson(user, lesson_id)
    return ProgressResponse.model_validate(progress)


@router.post("/{lesson_id}/submit", response_model=SubmitResponse)
async def submit_lesson(
    lesson_id: uuid.UUID,
    data: SubmitRequest,
    user: CurrentUser,
    db: DbSession,
):
    """
    Score a submission; on completion grant rewards, move the streak and
    add league points in the same transaction.
    """
    answers = [AnswerSubmission(**a.model_dump()) for a in data.answers]
    outcome = await LessonService(db).submit_lesson(user, lesson_id, answers, data.time_spent)
    return _submit_response(outcome)


@router.get("/{lesson_id}/progress", response_model=ProgressResponse)
async def get_lesson_progress(lesson_id: uuid.UUID, user: CurrentUser, db: DbSession):
    progress = await LessonService(db).get_progress(user.id, lesson_id)
    if progress is None:
        raise NotFoundError("No progress found for this lesson")
    return ProgressResponse.model_validate(progress)


@router.delete("/{lesson_id}/progress", response_model=SuccessResponse)
async def reset_lesson_progress(lesson_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Forget progress on a lesson. Rewards already earned are kept."""
    await LessonService(db).reset_progress(user, lesson_id)
    return SuccessResponse(message="Lesson progress reset successfully")
