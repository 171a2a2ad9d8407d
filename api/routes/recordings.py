"""REST endpoints for recordings and their segments.

Recordings are created from an already-extracted pitch series; audio
files are not accepted here.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_pitch_store
from api.schemas.practice import PitchSampleModel
from api.schemas.recordings import (
    CreateRecordingRequest,
    CreateSegmentRequest,
    RecordingListResponse,
    RecordingResponse,
    SegmentListResponse,
    SegmentResponse,
    UpdateSegmentRequest,
)
from core.practice.errors import InvalidPitchDataError, NotFoundError, PersistenceError
from core.practice.pitch import parse_pitch_samples
from core.practice.types import PitchSample
from db.models import Recording, Segment
from ingestion.pitch_store import SqlPitchSeriesStore

recordings_router = APIRouter(prefix="/recordings", tags=["recordings"])
segments_router = APIRouter(prefix="/segments", tags=["segments"])

PitchStore = Annotated[SqlPitchSeriesStore, Depends(get_pitch_store)]

_STORE_UNAVAILABLE = "Practice data store unavailable"


def _samples_out(samples: tuple[PitchSample, ...]) -> list[PitchSampleModel]:
    return [PitchSampleModel.from_sample(s) for s in samples]


def _recording_response(recording: Recording, include_pitch: bool) -> RecordingResponse:
    return RecordingResponse(
        recording_id=recording.id,
        user_id=recording.user_id,
        filename=recording.filename,
        duration=recording.duration,
        sample_count=len(recording.samples),
        pitch_data=(
            [PitchSampleModel(time=s.time, frequency=s.frequency) for s in recording.samples]
            if include_pitch
            else None
        ),
    )


def _segment_response(
    segment: Segment, pitch: tuple[PitchSample, ...] | None = None
) -> SegmentResponse:
    return SegmentResponse(
        segment_id=segment.id,
        user_id=segment.user_id,
        recording_id=segment.recording_id,
        name=segment.name,
        start_time=segment.start_time,
        end_time=segment.end_time,
        pitch_data=_samples_out(pitch) if pitch is not None else None,
    )


# --------------------------------------------------------------------------- #
# Recordings                                                                   #
# --------------------------------------------------------------------------- #


@recordings_router.post("/", response_model=RecordingResponse, status_code=201)
def create_recording(body: CreateRecordingRequest, store: PitchStore) -> RecordingResponse:
    """Store a recording with its pitch series."""
    raw = body.pitch_data
    if not isinstance(raw, str):
        raw = [s.model_dump() for s in raw]
    try:
        samples = parse_pitch_samples(raw)
        recording = store.create_recording(
            user_id=body.user_id,
            filename=body.filename,
            samples=samples,
            duration=body.duration,
        )
    except InvalidPitchDataError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _recording_response(recording, include_pitch=False)


@recordings_router.get("/", response_model=RecordingListResponse)
def list_recordings(user_id: str, store: PitchStore) -> RecordingListResponse:
    """List a user's recordings (without pitch data)."""
    try:
        recordings = store.list_recordings(user_id)
        items = [_recording_response(r, include_pitch=False) for r in recordings]
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return RecordingListResponse(recordings=items, total=len(items))


@recordings_router.get("/{recording_id}", response_model=RecordingResponse)
def get_recording(recording_id: str, store: PitchStore) -> RecordingResponse:
    """Fetch a recording with its full pitch series."""
    try:
        recording = store.get_recording(recording_id)
        return _recording_response(recording, include_pitch=True)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc


@recordings_router.delete("/{recording_id}", status_code=204)
def delete_recording(recording_id: str, store: PitchStore) -> None:
    """Delete a recording and its segments. Practice history is kept."""
    try:
        deleted = store.delete_recording(recording_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Recording not found: {recording_id!r}")


# --------------------------------------------------------------------------- #
# Segments                                                                     #
# --------------------------------------------------------------------------- #


@segments_router.post("/", response_model=SegmentResponse, status_code=201)
def create_segment(body: CreateSegmentRequest, store: PitchStore) -> SegmentResponse:
    """Define a named window over a recording."""
    try:
        segment = store.create_segment(
            user_id=body.user_id,
            recording_id=body.recording_id,
            name=body.name,
            start_time=body.start_time,
            end_time=body.end_time,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _segment_response(segment)


@segments_router.get("/", response_model=SegmentListResponse)
def list_segments(user_id: str, recording_id: str, store: PitchStore) -> SegmentListResponse:
    """List a user's segments over one recording."""
    try:
        segments = store.list_segments(user_id, recording_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return SegmentListResponse(
        segments=[_segment_response(s) for s in segments], total=len(segments)
    )


@segments_router.get("/{segment_id}", response_model=SegmentResponse)
def get_segment(segment_id: str, store: PitchStore) -> SegmentResponse:
    """Fetch a segment with the pitch samples inside its window."""
    try:
        segment = store.get_segment_row(segment_id)
        pitch = store.segment_pitch_sequence(segment_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _segment_response(segment, pitch)


@segments_router.put("/{segment_id}", response_model=SegmentResponse)
def update_segment(
    segment_id: str, body: UpdateSegmentRequest, store: PitchStore
) -> SegmentResponse:
    """Rename or re-window a segment. Past progress records are unaffected."""
    try:
        segment = store.update_segment(
            segment_id,
            name=body.name,
            start_time=body.start_time,
            end_time=body.end_time,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    return _segment_response(segment)


@segments_router.delete("/{segment_id}", status_code=204)
def delete_segment(segment_id: str, store: PitchStore) -> None:
    try:
        deleted = store.delete_segment(segment_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=_STORE_UNAVAILABLE) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Segment not found: {segment_id!r}")
