"""
Tests for the SQLAlchemy stores in ingestion/.

Each test runs against a fresh SQLite file, so unique constraints and
cascades are the real database's, not mocks.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from core.practice import stores
from core.practice.errors import NotFoundError, PersistenceError, StaleStreakError
from core.practice.types import Achievement, PitchSample, ProgressRecord, StreakState
from db.models import PitchSampleRow, Segment
from ingestion.pitch_store import SqlPitchSeriesStore
from ingestion.progress_store import SqlAchievementStore, SqlProgressRecordStore, SqlStreakStore
from ingestion.user_store import SqlUserStore

D = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 18, 30, tzinfo=UTC)


def _record(user_id: str, accuracy: str = "50.00%") -> ProgressRecord:
    return ProgressRecord(
        user_id=user_id,
        reference_kind="recording",
        reference_id="rec-1",
        user_pitch_data=(PitchSample(0.0, 442.0), PitchSample(1.0, 450.0)),
        reference_pitch_data=(PitchSample(0.0, 440.0), PitchSample(1.0, 445.0)),
        total_entries=2,
        total_matches=1,
        accuracy=accuracy,
        created_at=NOW,
    )


def _streak(user_id: str, current: int = 1, longest: int = 1, version: int = 0) -> StreakState:
    return StreakState(
        user_id=user_id,
        current_streak=current,
        longest_streak=longest,
        last_practice_date=D,
        version=version,
    )


# ---------------------------------------------------------------------------
# Pitch series store
# ---------------------------------------------------------------------------


class TestPitchSeriesStore:
    def test_pitch_sequence_keeps_stored_order(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, reference_samples
    ) -> None:
        assert pitch_store.get_pitch_sequence(recording_id) == reference_samples

    def test_unsorted_samples_are_not_reordered(
        self, pitch_store: SqlPitchSeriesStore, user_id: str
    ) -> None:
        samples = (PitchSample(2.0, 300.0), PitchSample(1.0, 200.0))
        recording = pitch_store.create_recording(user_id, "unsorted.wav", samples)
        assert pitch_store.get_pitch_sequence(recording.id) == samples

    def test_unknown_recording_raises_not_found(self, pitch_store: SqlPitchSeriesStore) -> None:
        with pytest.raises(NotFoundError, match="Recording not found"):
            pitch_store.get_pitch_sequence("missing")

    def test_list_recordings_filters_by_user(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str, reference_samples
    ) -> None:
        pitch_store.create_recording("someone-else", "other.mp3", reference_samples)
        assert [r.id for r in pitch_store.list_recordings(user_id)] == [recording_id]

    def test_segment_window(self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str) -> None:
        segment = pitch_store.create_segment(user_id, recording_id, "chorus", 1.0, 3.0)
        window = pitch_store.get_segment(segment.id)
        assert (window.recording_id, window.start_time, window.end_time) == (recording_id, 1.0, 3.0)
        assert window.name == "chorus"

    def test_segment_pitch_sequence_is_inclusive_slice(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str, reference_samples
    ) -> None:
        segment = pitch_store.create_segment(user_id, recording_id, "chorus", 1.0, 3.0)
        assert pitch_store.segment_pitch_sequence(segment.id) == reference_samples[1:4]

    def test_segment_on_unknown_recording_raises(
        self, pitch_store: SqlPitchSeriesStore, user_id: str
    ) -> None:
        with pytest.raises(NotFoundError):
            pitch_store.create_segment(user_id, "missing", "verse", 0.0, 1.0)

    def test_segment_with_inverted_window_raises(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str
    ) -> None:
        with pytest.raises(ValueError, match="must not be before"):
            pitch_store.create_segment(user_id, recording_id, "verse", 3.0, 1.0)

    def test_update_segment_rewindows(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str, reference_samples
    ) -> None:
        segment = pitch_store.create_segment(user_id, recording_id, "chorus", 1.0, 3.0)
        updated = pitch_store.update_segment(segment.id, name="bridge", end_time=2.0)
        assert (updated.name, updated.start_time, updated.end_time) == ("bridge", 1.0, 2.0)
        assert pitch_store.segment_pitch_sequence(segment.id) == reference_samples[1:3]

    def test_update_segment_rejects_invalid_window(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str
    ) -> None:
        segment = pitch_store.create_segment(user_id, recording_id, "chorus", 1.0, 3.0)
        with pytest.raises(ValueError):
            pitch_store.update_segment(segment.id, start_time=4.0)

    def test_list_segments_ordered_by_start(
        self, pitch_store: SqlPitchSeriesStore, recording_id: str, user_id: str
    ) -> None:
        pitch_store.create_segment(user_id, recording_id, "late", 3.0, 4.0)
        pitch_store.create_segment(user_id, recording_id, "early", 0.0, 1.0)
        names = [s.name for s in pitch_store.list_segments(user_id, recording_id)]
        assert names == ["early", "late"]

    def test_delete_recording_cascades(
        self,
        pitch_store: SqlPitchSeriesStore,
        session: Session,
        recording_id: str,
        user_id: str,
    ) -> None:
        pitch_store.create_segment(user_id, recording_id, "chorus", 1.0, 3.0)
        assert pitch_store.delete_recording(recording_id) is True
        assert session.scalar(select(func.count()).select_from(PitchSampleRow)) == 0
        assert session.scalar(select(func.count()).select_from(Segment)) == 0

    def test_delete_missing_returns_false(self, pitch_store: SqlPitchSeriesStore) -> None:
        assert pitch_store.delete_recording("missing") is False
        assert pitch_store.delete_segment("missing") is False


# ---------------------------------------------------------------------------
# Progress records
# ---------------------------------------------------------------------------


class TestProgressRecordStore:
    def test_append_assigns_id(self, session: Session) -> None:
        stored = SqlProgressRecordStore(session).append(_record("u1"))
        assert stored.record_id is not None
        assert stored.created_at == NOW

    def test_round_trip_preserves_snapshots(self, session: Session) -> None:
        store = SqlProgressRecordStore(session)
        stored = store.append(_record("u1"))
        (loaded,) = store.list_by_user("u1")
        assert loaded.user_pitch_data == stored.user_pitch_data
        assert loaded.reference_pitch_data == stored.reference_pitch_data
        assert loaded.accuracy == "50.00%"

    def test_list_newest_first_by_default(self, session: Session) -> None:
        store = SqlProgressRecordStore(session)
        store.append(_record("u1", "10.00%"))
        store.append(_record("u1", "20.00%"))
        store.append(_record("u2", "99.00%"))
        assert [r.accuracy for r in store.list_by_user("u1")] == ["20.00%", "10.00%"]
        assert [r.accuracy for r in store.list_by_user("u1", newest_first=False)] == [
            "10.00%",
            "20.00%",
        ]

    def test_database_failure_becomes_persistence_error(self, session: Session) -> None:
        store = SqlProgressRecordStore(session)
        with patch.object(
            session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        ):
            with pytest.raises(PersistenceError, match="append progress record failed"):
                store.append(_record("u1"))


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


class TestStreakStore:
    def test_get_missing_returns_none(self, session: Session) -> None:
        assert SqlStreakStore(session).get("u1") is None

    def test_insert_then_get(self, session: Session) -> None:
        store = SqlStreakStore(session)
        written = store.upsert(_streak("u1"))
        assert written.version == 1
        assert store.get("u1") == written

    def test_conditional_update_bumps_version(self, session: Session) -> None:
        store = SqlStreakStore(session)
        store.upsert(_streak("u1"))
        current = store.get("u1")
        assert current is not None
        written = store.upsert(_streak("u1", current=2, longest=2, version=current.version))
        assert written.version == 2
        loaded = store.get("u1")
        assert loaded is not None
        assert (loaded.current_streak, loaded.longest_streak, loaded.version) == (2, 2, 2)

    def test_stale_update_raises(self, session: Session) -> None:
        store = SqlStreakStore(session)
        store.upsert(_streak("u1"))
        store.upsert(_streak("u1", current=2, longest=2, version=1))
        with pytest.raises(StaleStreakError) as exc_info:
            store.upsert(_streak("u1", current=5, longest=5, version=1))
        assert exc_info.value.expected_version == 1
        loaded = store.get("u1")
        assert loaded is not None
        assert loaded.current_streak == 2

    def test_racing_insert_raises_stale(self, session: Session) -> None:
        store = SqlStreakStore(session)
        store.upsert(_streak("u1"))
        with pytest.raises(StaleStreakError):
            store.upsert(_streak("u1"))

    def test_stale_error_is_a_persistence_error(self) -> None:
        assert issubclass(StaleStreakError, PersistenceError)


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class TestAchievementStore:
    def _achievement(self, title: str = "Accuracy Master") -> Achievement:
        return Achievement(
            user_id="u1",
            title=title,
            description="Achieved 90%+ accuracy in a song",
            unlocked_at=NOW,
        )

    def test_append_and_exists(self, session: Session) -> None:
        store = SqlAchievementStore(session)
        assert store.exists("u1", "Accuracy Master") is False
        stored = store.append(self._achievement())
        assert stored is not None
        assert stored.achievement_id is not None
        assert store.exists("u1", "Accuracy Master") is True

    def test_duplicate_title_returns_none(self, session: Session) -> None:
        store = SqlAchievementStore(session)
        store.append(self._achievement())
        assert store.append(self._achievement()) is None
        assert len(store.list_by_user("u1")) == 1

    def test_store_usable_after_duplicate(self, session: Session) -> None:
        store = SqlAchievementStore(session)
        store.append(self._achievement())
        store.append(self._achievement())
        assert store.append(self._achievement("7-Day Streak")) is not None

    def test_list_most_recent_first(self, session: Session) -> None:
        store = SqlAchievementStore(session)
        store.append(self._achievement("Accuracy Master"))
        store.append(self._achievement("7-Day Streak"))
        assert [a.title for a in store.list_by_user("u1")] == ["7-Day Streak", "Accuracy Master"]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_and_get(self, user_store: SqlUserStore) -> None:
        user = user_store.create(full_name="Ravi", age=31)
        loaded = user_store.get(user.id)
        assert (loaded.full_name, loaded.age) == ("Ravi", 31)
        assert user_store.exists(user.id)

    def test_unknown_field_rejected(self, user_store: SqlUserStore) -> None:
        with pytest.raises(ValueError, match="unknown profile fields"):
            user_store.create(nickname="r")

    def test_update_skips_none(self, user_store: SqlUserStore, user_id: str) -> None:
        user = user_store.update(user_id, email=None, country_code="IN")
        assert user.email == "asha@example.com"
        assert user.country_code == "IN"

    def test_get_missing_raises(self, user_store: SqlUserStore) -> None:
        with pytest.raises(NotFoundError, match="User not found"):
            user_store.get("missing")

    def test_delete(self, user_store: SqlUserStore, user_id: str) -> None:
        assert user_store.delete(user_id) is True
        assert user_store.exists(user_id) is False
        assert user_store.delete(user_id) is False


# ---------------------------------------------------------------------------
# Protocol conformance
# ---------------------------------------------------------------------------


def test_sql_stores_satisfy_engine_protocols(session: Session) -> None:
    assert isinstance(SqlPitchSeriesStore(session), stores.PitchSeriesStore)
    assert isinstance(SqlProgressRecordStore(session), stores.ProgressRecordStore)
    assert isinstance(SqlStreakStore(session), stores.StreakStore)
    assert isinstance(SqlAchievementStore(session), stores.AchievementStore)
    assert isinstance(SqlUserStore(session), stores.UserStore)
