"""Pydantic schemas for /practice endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from core.practice.types import Achievement, PitchSample, ProgressRecord, StreakState

ReferenceKindEnum = Literal["recording", "segment"]


class PitchSampleModel(BaseModel):
    """One pitch sample on the wire."""

    time: float = Field(..., ge=0, allow_inf_nan=False, description="Seconds from start")
    frequency: float = Field(..., ge=0, allow_inf_nan=False, description="Frequency in Hz")

    @classmethod
    def from_sample(cls, sample: PitchSample) -> PitchSampleModel:
        return cls(time=sample.time, frequency=sample.frequency)


class ComparisonRequest(BaseModel):
    reference_kind: ReferenceKindEnum
    reference_id: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., min_length=1, max_length=64)
    user_pitch_data: list[PitchSampleModel]


class StreakResponse(BaseModel):
    user_id: str
    current_streak: int
    longest_streak: int
    last_practice_date: date

    @classmethod
    def from_state(cls, state: StreakState) -> StreakResponse:
        return cls(
            user_id=state.user_id,
            current_streak=state.current_streak,
            longest_streak=state.longest_streak,
            last_practice_date=state.last_practice_date,
        )


class AchievementResponse(BaseModel):
    achievement_id: int | None
    user_id: str
    title: str
    description: str
    unlocked_at: datetime

    @classmethod
    def from_achievement(cls, achievement: Achievement) -> AchievementResponse:
        return cls(
            achievement_id=achievement.achievement_id,
            user_id=achievement.user_id,
            title=achievement.title,
            description=achievement.description,
            unlocked_at=achievement.unlocked_at,
        )


class ProgressRecordResponse(BaseModel):
    """Serialized ProgressRecord."""

    record_id: int | None
    user_id: str
    reference_kind: ReferenceKindEnum
    reference_id: str
    user_pitch_data: list[PitchSampleModel]
    reference_pitch_data: list[PitchSampleModel]
    total_entries: int
    total_matches: int
    accuracy: str
    created_at: datetime | None

    @classmethod
    def from_record(cls, record: ProgressRecord) -> ProgressRecordResponse:
        return cls(**_record_fields(record))


class ComparisonResponse(ProgressRecordResponse):
    """Progress record of this attempt plus feedback."""

    suggestions: list[str]
    streak: StreakResponse
    unlocked_achievements: list[AchievementResponse]


class HistoryResponse(BaseModel):
    records: list[ProgressRecordResponse]
    total: int


class AchievementListResponse(BaseModel):
    achievements: list[AchievementResponse]
    total: int


def _record_fields(record: ProgressRecord) -> dict:
    return {
        "record_id": record.record_id,
        "user_id": record.user_id,
        "reference_kind": record.reference_kind,
        "reference_id": record.reference_id,
        "user_pitch_data": [PitchSampleModel.from_sample(s) for s in record.user_pitch_data],
        "reference_pitch_data": [
            PitchSampleModel.from_sample(s) for s in record.reference_pitch_data
        ],
        "total_entries": record.total_entries,
        "total_matches": record.total_matches,
        "accuracy": record.accuracy,
        "created_at": record.created_at,
    }


def comparison_response(
    record: ProgressRecord,
    suggestions: list[str],
    streak: StreakState,
    unlocked: list[Achievement],
) -> ComparisonResponse:
    """Assemble the scoring response from engine output."""
    return ComparisonResponse(
        **_record_fields(record),
        suggestions=suggestions,
        streak=StreakResponse.from_state(streak),
        unlocked_achievements=[AchievementResponse.from_achievement(a) for a in unlocked],
    )
