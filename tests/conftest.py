"""
Pytest fixtures for Featherlearn tests.

Uses a temp file SQLite DB so the app and the fixtures share one database.
"""

import itertools
import os
import tempfile
from typing import AsyncGenerator, Callable, Dict, List, Optional

# Use file-based SQLite so all connections share the same DB (in-memory is per-connection)
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["REFERENCE_TIMEZONE"] = "UTC"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.config import get_settings

# Force config reload so app uses test DB
get_settings.cache_clear()

from featherlearn.database import async_session_maker, engine
from featherlearn.engines.progression.lesson_service import LessonService
from featherlearn.engines.progression.league_service import seed_league_tiers
from featherlearn.kernel.identity.identity_service import role_value
from featherlearn.kernel.identity.jwt import JWTManager
from featherlearn.kernel.identity.password import hash_password
from featherlearn.kernel.models import Base, Lesson, User, UserRole
from featherlearn.kernel.models.user import default_user_settings
from featherlearn.main import app

TEST_PASSWORD = "Password123"


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp DB file after test run."""
    for path in (TEST_DB_PATH, f"{TEST_DB_PATH}-wal", f"{TEST_DB_PATH}-shm"):
        if os.path.exists(path):
            os.unlink(path)


@pytest_asyncio.fixture
async def db_engine():
    """Fresh schema plus the default league ladder for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        await seed_league_tiers(session)
        await session.commit()

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable:
    """Factory for committed users; extra keyword arguments set User columns."""
    counter = itertools.count(1)

    async def _make(name: Optional[str] = None, role: UserRole = UserRole.USER, **fields) -> User:
        n = next(counter)
        user = User(
            email=f"learner{n}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            name=name or f"Learner {n}",
            role=role,
            settings=default_user_settings(),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user(name="Test Learner")


@pytest_asyncio.fixture
async def test_admin(make_user) -> User:
    return await make_user(name="Test Admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def make_lesson(db_session: AsyncSession, test_admin: User) -> Callable:
    """
    Factory for committed lessons.

    ``answers`` gives one exercise per correct answer, in order.
    """

    async def _make(
        answers: List[str] = ("hola", "adios", "gracias", "por favor"),
        title: str = "Spanish Basics",
        **fields,
    ) -> Lesson:
        data: Dict = {
            "title": title,
            "description": "Everyday greetings",
            "lesson_type": "vocabulary",
            "category": "beginner",
            "difficulty": 1,
            "xp_reward": 50,
            "feather_reward": 5,
        }
        data.update(fields)
        exercises = [
            {
                "exercise_type": "multiple-choice",
                "question": f"Question {i + 1}",
                "options": [answer, "wrong"],
                "correct_answer": answer,
            }
            for i, answer in enumerate(answers)
        ]
        lesson = await LessonService(db_session).create_lesson(data, exercises, created_by=test_admin.id)
        await db_session.commit()
        return lesson

    return _make


@pytest.fixture
def jwt_manager() -> JWTManager:
    return JWTManager(
        secret_key=get_settings().secret_key,
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


@pytest.fixture
def headers_for(jwt_manager: JWTManager) -> Callable[[User], dict]:
    """Bearer headers for any user."""

    def _headers(user: User) -> dict:
        token = jwt_manager.issue(user.id, user.email, role_value(user))
        return {"Authorization": f"Bearer {token.access_token}"}

    return _headers


@pytest.fixture
def auth_headers(test_user: User, headers_for) -> dict:
    return headers_for(test_user)


@pytest.fixture
def admin_headers(test_admin: User, headers_for) -> dict:
    return headers_for(test_admin)


@pytest_asyncio.fixture
async def client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
