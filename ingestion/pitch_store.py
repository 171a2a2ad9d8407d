"""SQLAlchemy-backed Pitch Series Store: recordings, their samples, and segments.

Implements the read contract the practice engine needs
(``get_pitch_sequence``, ``get_segment``) plus the CRUD operations behind
the /recordings and /segments endpoints. Recordings are immutable after
creation; segments may be renamed or re-windowed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.practice.errors import NotFoundError
from core.practice.pitch import slice_window
from core.practice.types import PitchSample, SegmentWindow
from db.models import PitchSampleRow, Recording, Segment
from ingestion.sql_errors import persistence_guard

logger = logging.getLogger(__name__)


def _to_window(segment: Segment) -> SegmentWindow:
    return SegmentWindow(
        segment_id=segment.id,
        recording_id=segment.recording_id,
        start_time=segment.start_time,
        end_time=segment.end_time,
        name=segment.name,
    )


class SqlPitchSeriesStore:
    """Pitch series persistence over one SQLAlchemy session.

    Args:
        session: Request-scoped session. Each write commits.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------ #
    # Engine contract                                                      #
    # ------------------------------------------------------------------ #

    def get_pitch_sequence(self, recording_id: str) -> tuple[PitchSample, ...]:
        """Return a recording's samples in stored order.

        Raises:
            NotFoundError: If the recording does not exist.
        """
        recording = self.get_recording(recording_id)
        return tuple(PitchSample(time=s.time, frequency=s.frequency) for s in recording.samples)

    def get_segment(self, segment_id: str) -> SegmentWindow:
        """Return the window of a segment.

        Raises:
            NotFoundError: If the segment does not exist.
        """
        return _to_window(self.get_segment_row(segment_id))

    # ------------------------------------------------------------------ #
    # Recordings                                                           #
    # ------------------------------------------------------------------ #

    def create_recording(
        self,
        user_id: str,
        filename: str,
        samples: Sequence[PitchSample],
        duration: str | None = None,
    ) -> Recording:
        """Persist a recording with its pitch series.

        Args:
            user_id: Owner.
            filename: Original audio file name (the audio itself is not stored).
            samples: Validated pitch samples, stored in the given order.
            duration: Free-form duration label, e.g. ``"03:42"``.

        Returns:
            The persisted ``Recording`` with ``samples`` loaded.
        """
        recording = Recording(
            user_id=user_id,
            filename=filename,
            duration=duration,
            samples=[
                PitchSampleRow(position=i, time=s.time, frequency=s.frequency)
                for i, s in enumerate(samples)
            ],
        )
        with persistence_guard(self._session, "create recording"):
            self._session.add(recording)
            self._session.commit()
        logger.info(
            "Recording %s created for user %s (%d samples)",
            recording.id,
            user_id,
            len(samples),
        )
        return recording

    def get_recording(self, recording_id: str) -> Recording:
        """Fetch a recording by id.

        Raises:
            NotFoundError: If the recording does not exist.
        """
        with persistence_guard(self._session, "get recording"):
            recording = self._session.get(Recording, recording_id)
        if recording is None:
            raise NotFoundError("Recording", recording_id)
        return recording

    def list_recordings(self, user_id: str) -> list[Recording]:
        """Return a user's recordings, oldest first."""
        stmt = (
            select(Recording)
            .where(Recording.user_id == user_id)
            .order_by(Recording.created_at, Recording.id)
        )
        with persistence_guard(self._session, "list recordings"):
            return list(self._session.scalars(stmt))

    def delete_recording(self, recording_id: str) -> bool:
        """Delete a recording, its samples and its segments.

        Progress records keep their own snapshots and are not touched.

        Returns:
            True if a recording was deleted, False if not found.
        """
        with persistence_guard(self._session, "delete recording"):
            recording = self._session.get(Recording, recording_id)
            if recording is None:
                return False
            self._session.delete(recording)
            self._session.commit()
        logger.info("Recording %s deleted", recording_id)
        return True

    # ------------------------------------------------------------------ #
    # Segments                                                             #
    # ------------------------------------------------------------------ #

    def create_segment(
        self,
        user_id: str,
        recording_id: str,
        name: str,
        start_time: float,
        end_time: float,
    ) -> Segment:
        """Persist a segment over an existing recording.

        Raises:
            NotFoundError: If the recording does not exist.
            ValueError: If the window is invalid.
        """
        self.get_recording(recording_id)
        SegmentWindow(
            segment_id="",
            recording_id=recording_id,
            start_time=start_time,
            end_time=end_time,
            name=name,
        )
        segment = Segment(
            user_id=user_id,
            recording_id=recording_id,
            name=name,
            start_time=start_time,
            end_time=end_time,
        )
        with persistence_guard(self._session, "create segment"):
            self._session.add(segment)
            self._session.commit()
        return segment

    def get_segment_row(self, segment_id: str) -> Segment:
        with persistence_guard(self._session, "get segment"):
            segment = self._session.get(Segment, segment_id)
        if segment is None:
            raise NotFoundError("Segment", segment_id)
        return segment

    def update_segment(
        self,
        segment_id: str,
        name: str | None = None,
        start_time: float | None = None,
        end_time: float | None = None,
    ) -> Segment:
        """Rename or re-window a segment. ``None`` leaves a field unchanged.

        Raises:
            NotFoundError: If the segment does not exist.
            ValueError: If the resulting window is invalid.
        """
        segment = self.get_segment_row(segment_id)
        new_start = segment.start_time if start_time is None else start_time
        new_end = segment.end_time if end_time is None else end_time
        SegmentWindow(
            segment_id=segment.id,
            recording_id=segment.recording_id,
            start_time=new_start,
            end_time=new_end,
        )
        with persistence_guard(self._session, "update segment"):
            if name is not None:
                segment.name = name
            segment.start_time = new_start
            segment.end_time = new_end
            self._session.commit()
        return segment

    def list_segments(self, user_id: str, recording_id: str) -> list[Segment]:
        stmt = (
            select(Segment)
            .where(Segment.user_id == user_id, Segment.recording_id == recording_id)
            .order_by(Segment.start_time)
        )
        with persistence_guard(self._session, "list segments"):
            return list(self._session.scalars(stmt))

    def segment_pitch_sequence(self, segment_id: str) -> tuple[PitchSample, ...]:
        """The segment's effective sequence: its recording's samples inside the window."""
        window = self.get_segment(segment_id)
        return slice_window(self.get_pitch_sequence(window.recording_id), window)

    def delete_segment(self, segment_id: str) -> bool:
        with persistence_guard(self._session, "delete segment"):
            segment = self._session.get(Segment, segment_id)
            if segment is None:
                return False
            self._session.delete(segment)
            self._session.commit()
        return True
