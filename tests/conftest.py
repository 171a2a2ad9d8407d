"""
Shared fixtures for the test suite.

Every test gets its own SQLite file under ``tmp_path`` so stores and
routes run against a real, isolated schema.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from api.deps import get_db
from api.main import app
from core.practice.types import PitchSample
from db.models import Base
from db.session import build_engine
from ingestion.pitch_store import SqlPitchSeriesStore
from ingestion.practice_engine import PracticeEngine
from ingestion.progress_store import (
    SqlAchievementStore,
    SqlProgressRecordStore,
    SqlStreakStore,
)
from ingestion.user_store import SqlUserStore

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

REFERENCE_SAMPLES: tuple[PitchSample, ...] = (
    PitchSample(time=0.0, frequency=440.0),
    PitchSample(time=1.0, frequency=445.0),
    PitchSample(time=2.0, frequency=450.0),
    PitchSample(time=3.0, frequency=455.0),
    PitchSample(time=4.0, frequency=460.0),
)
"""Five-sample reference: one sample per second, rising 5 Hz each step."""


@pytest.fixture()
def reference_samples() -> tuple[PitchSample, ...]:
    return REFERENCE_SAMPLES


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'practice.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def pitch_store(session: Session) -> SqlPitchSeriesStore:
    return SqlPitchSeriesStore(session)


@pytest.fixture()
def user_store(session: Session) -> SqlUserStore:
    return SqlUserStore(session)


@pytest.fixture()
def practice_engine(session: Session) -> PracticeEngine:
    return PracticeEngine(
        pitch_store=SqlPitchSeriesStore(session),
        progress_store=SqlProgressRecordStore(session),
        streak_store=SqlStreakStore(session),
        achievement_store=SqlAchievementStore(session),
        user_store=SqlUserStore(session),
    )


@pytest.fixture()
def user_id(user_store: SqlUserStore) -> str:
    return user_store.create(full_name="Asha Singer", email="asha@example.com").id


@pytest.fixture()
def recording_id(pitch_store: SqlPitchSeriesStore, user_id: str) -> str:
    recording = pitch_store.create_recording(
        user_id=user_id,
        filename="raga_yaman.mp3",
        samples=REFERENCE_SAMPLES,
        duration="00:05",
    )
    return recording.id


# ---------------------------------------------------------------------------
# FastAPI test client fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client(session_factory: sessionmaker[Session]) -> Generator[TestClient, None, None]:
    """FastAPI ``TestClient`` whose ``get_db`` yields sessions on the tmp database."""

    def _override_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
