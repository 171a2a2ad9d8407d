"""REST endpoints for user profiles."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_achievement_store, get_streak_store, get_user_store
from api.schemas.practice import AchievementResponse, StreakResponse
from api.schemas.users import UserDetailResponse, UserProfile, UserResponse
from core.practice.errors import NotFoundError, PersistenceError
from db.models import User
from ingestion.progress_store import SqlAchievementStore, SqlStreakStore
from ingestion.user_store import PROFILE_FIELDS, SqlUserStore

router = APIRouter(prefix="/users", tags=["users"])

Users = Annotated[SqlUserStore, Depends(get_user_store)]
Streaks = Annotated[SqlStreakStore, Depends(get_streak_store)]
Achievements = Annotated[SqlAchievementStore, Depends(get_achievement_store)]

_STORE_UNAVAILABLE = "Practice data store unavailable"


def _to_response(user: User) -> UserResponse:
    return UserResponse(user_id=user.id, **{f: getattr(user, f) for f in PROFILE_FIELDS})


@router.post("/", response_model=UserResponse, status_code=201)
def create_user(body: UserProfile, users: Users) -> UserResponse:
    try:
        user = users.create(**body.model_dump())
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _to_response(user)


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: str,
    users: Users,
    streaks: Streaks,
    achievements: Achievements,
) -> UserDetailResponse:
    """Profile with current streak (null before the first attempt) and achievements."""
    try:
        user = users.get(user_id)
        streak = streaks.get(user_id)
        unlocked = achievements.list_by_user(user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return UserDetailResponse(
        **_to_response(user).model_dump(),
        streak=StreakResponse.from_state(streak) if streak is not None else None,
        achievements=[AchievementResponse.from_achievement(a) for a in unlocked],
    )


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: str, body: UserProfile, users: Users) -> UserResponse:
    """Update profile fields; omitted or null fields are left unchanged."""
    try:
        user = users.update(user_id, **body.model_dump())
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _to_response(user)


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, users: Users) -> None:
    try:
        deleted = users.delete(user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail=f"User not found: {user_id!r}")
