"""Pydantic schemas for /recordings and /segments endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from api.schemas.practice import PitchSampleModel


class CreateRecordingRequest(BaseModel):
    """A recording is created from its extracted pitch series.

    ``pitch_data`` is either a list of samples or the raw JSON text the
    pitch extractor writes.
    """

    user_id: str = Field(..., min_length=1, max_length=64)
    filename: str = Field(..., min_length=1, max_length=512)
    duration: str | None = Field(default=None, max_length=32)
    pitch_data: list[PitchSampleModel] | str


class RecordingResponse(BaseModel):
    recording_id: str
    user_id: str
    filename: str
    duration: str | None
    sample_count: int
    pitch_data: list[PitchSampleModel] | None = None


class RecordingListResponse(BaseModel):
    recordings: list[RecordingResponse]
    total: int


class CreateSegmentRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    recording_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=256)
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., ge=0)


class UpdateSegmentRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    start_time: float | None = Field(default=None, ge=0)
    end_time: float | None = Field(default=None, ge=0)


class SegmentResponse(BaseModel):
    segment_id: str
    user_id: str
    recording_id: str
    name: str
    start_time: float
    end_time: float
    pitch_data: list[PitchSampleModel] | None = None


class SegmentListResponse(BaseModel):
    segments: list[SegmentResponse]
    total: int
