"""
API v1 routes.
"""

from fastapi import APIRouter

from featherlearn.api.v1 import auth, users, lessons, progress, leagues, quests

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(lessons.router, prefix="/lessons", tags=["Lessons"])
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(leagues.router, prefix="/leagues", tags=["Leagues"])
router.include_router(quests.router, prefix="/quests", tags=["Quests"])
