"""
Featherlearn API.

Run with ``uvicorn featherlearn.main:app`` or ``python -m featherlearn.main``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from featherlearn.config import get_settings
from featherlearn.database import async_session_maker, init_db, close_db
from featherlearn.api.errors import register_exception_handlers
from featherlearn.api.v1 import router as api_v1_router
from featherlearn.api.middleware.request_id import RequestIdMiddleware
from featherlearn.schemas.common import HealthResponse
from featherlearn.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Set up logging and the schema (plus league ladder) before serving."""
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )
    logger.info(
        "Starting %s v%s (%s)",
        settings.project_name,
        settings.version,
        settings.environment,
        extra={"reference_timezone": settings.reference_timezone},
    )
    await init_db()

    yield

    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Backend for the Featherlearn language-learning app.

    - **Lessons**: catalogue, prerequisites, recommendations and scored submissions
    - **Rewards**: XP, feathers and levels earned by completing lessons
    - **Streaks**: consecutive learning days in a reference timezone
    - **Leagues**: point ladder with promotion and leaderboards
    - **Quests**: daily and weekly quests plus achievements, claimed once per period
    - **Social**: follow other learners and compare with friends

    XP, feathers, streak and league points never go negative. A lesson pays
    out at most once per learner and a quest at most once per period. Every
    reward-bearing change lands in the audit log.
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Last added runs outermost: CORS wraps the request-id middleware
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Liveness plus a database round-trip."""
    database = "connected"
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        database = "unavailable"
    return HealthResponse(
        status="ok" if database == "connected" else "degraded",
        version=settings.version,
        database=database,
    )


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {"v1": settings.api_v1_prefix},
    }


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "featherlearn.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
