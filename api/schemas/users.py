"""Pydantic schemas for /users endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from api.schemas.practice import AchievementResponse, StreakResponse


class UserProfile(BaseModel):
    full_name: str | None = Field(default=None, max_length=256)
    email: str | None = Field(default=None, max_length=256)
    gender: str | None = Field(default=None, max_length=32)
    country_code: str | None = Field(default=None, max_length=8)
    phone_number: str | None = Field(default=None, max_length=32)
    age: int | None = Field(default=None, ge=0, le=150)


class UserResponse(UserProfile):
    user_id: str


class UserDetailResponse(UserResponse):
    """Profile plus current streak and unlocked achievements."""

    streak: StreakResponse | None
    achievements: list[AchievementResponse]
