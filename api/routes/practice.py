"""REST endpoints for pitch comparison and practice progress."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_achievement_store, get_practice_engine, get_progress_store, get_streak_store
from api.schemas.practice import (
    AchievementListResponse,
    AchievementResponse,
    ComparisonRequest,
    ComparisonResponse,
    HistoryResponse,
    ProgressRecordResponse,
    StreakResponse,
    comparison_response,
)
from core.practice.errors import (
    EmptyComparisonError,
    InvalidPitchDataError,
    NotFoundError,
    PersistenceError,
)
from ingestion.practice_engine import PracticeEngine
from ingestion.progress_store import SqlAchievementStore, SqlProgressRecordStore, SqlStreakStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/practice", tags=["practice"])

Engine = Annotated[PracticeEngine, Depends(get_practice_engine)]
ProgressStore = Annotated[SqlProgressRecordStore, Depends(get_progress_store)]
StreakStore = Annotated[SqlStreakStore, Depends(get_streak_store)]
AchievementStore = Annotated[SqlAchievementStore, Depends(get_achievement_store)]


@router.post("/compare", response_model=ComparisonResponse)
def compare_pitch(body: ComparisonRequest, engine: Engine) -> ComparisonResponse:
    """Score the user's pitch against a recording or segment.

    Persists the attempt, advances the streak, unlocks achievements, and
    returns the stored record with suggestions.
    """
    try:
        result = engine.submit_comparison(
            reference_kind=body.reference_kind,
            reference_id=body.reference_id,
            user_id=body.user_id,
            user_pitch_data=[s.model_dump() for s in body.user_pitch_data],
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (EmptyComparisonError, InvalidPitchDataError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Comparison failed for user %s", body.user_id)
        raise HTTPException(status_code=503, detail="Practice data store unavailable") from exc

    return comparison_response(
        result.progress_record,
        list(result.suggestions),
        result.streak,
        list(result.unlocked),
    )


@router.get("/users/{user_id}/history", response_model=HistoryResponse)
def user_history(user_id: str, store: ProgressStore) -> HistoryResponse:
    """All scoring attempts of a user, newest first."""
    try:
        records = store.list_by_user(user_id, newest_first=True)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail="Practice data store unavailable") from exc
    return HistoryResponse(
        records=[ProgressRecordResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.get("/users/{user_id}/achievements", response_model=AchievementListResponse)
def user_achievements(user_id: str, store: AchievementStore) -> AchievementListResponse:
    """All achievements a user has unlocked, most recent first."""
    try:
        achievements = store.list_by_user(user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail="Practice data store unavailable") from exc
    return AchievementListResponse(
        achievements=[AchievementResponse.from_achievement(a) for a in achievements],
        total=len(achievements),
    )


@router.get("/users/{user_id}/streak", response_model=StreakResponse)
def user_streak(user_id: str, store: StreakStore) -> StreakResponse:
    """Current streak of a user; 404 until their first scored attempt."""
    try:
        state = store.get(user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail="Practice data store unavailable") from exc
    if state is None:
        raise HTTPException(status_code=404, detail=f"No streak for user: {user_id!r}")
    return StreakResponse.from_state(state)
