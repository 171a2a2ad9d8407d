"""
FastAPI dependency providers.

Reuses the canonical session factory from ``db.session`` to avoid
duplicate engine/sessionmaker definitions.  Stores are built per request
on the request's session; the practice config is read from the
environment once and reused.
"""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.config import PracticeConfig
from db.session import SessionLocal
from ingestion.pitch_store import SqlPitchSeriesStore
from ingestion.practice_engine import PracticeEngine
from ingestion.progress_store import (
    SqlAchievementStore,
    SqlProgressRecordStore,
    SqlStreakStore,
)
from ingestion.user_store import SqlUserStore


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session for FastAPI dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


DbSession = Annotated[Session, Depends(get_db)]

_practice_config: PracticeConfig | None = None


def get_practice_config() -> PracticeConfig:
    """
    Return a cached ``PracticeConfig`` singleton.

    Built from ``PRACTICE_*`` environment variables on first call.
    """
    global _practice_config  # noqa: PLW0603
    if _practice_config is None:
        _practice_config = PracticeConfig.from_env()
    return _practice_config


def get_pitch_store(db: DbSession) -> SqlPitchSeriesStore:
    return SqlPitchSeriesStore(db)


def get_progress_store(db: DbSession) -> SqlProgressRecordStore:
    return SqlProgressRecordStore(db)


def get_streak_store(db: DbSession) -> SqlStreakStore:
    return SqlStreakStore(db)


def get_achievement_store(db: DbSession) -> SqlAchievementStore:
    return SqlAchievementStore(db)


def get_user_store(db: DbSession) -> SqlUserStore:
    return SqlUserStore(db)


def get_practice_engine(
    db: DbSession,
    config: Annotated[PracticeConfig, Depends(get_practice_config)],
) -> PracticeEngine:
    """Build a request-scoped ``PracticeEngine`` over the request's session."""
    return PracticeEngine(
        pitch_store=SqlPitchSeriesStore(db),
        progress_store=SqlProgressRecordStore(db),
        streak_store=SqlStreakStore(db),
        achievement_store=SqlAchievementStore(db),
        user_store=SqlUserStore(db),
        config=config,
    )
