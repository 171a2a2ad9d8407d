"""SQLAlchemy-backed stores for progress records, streaks and achievements.

Three small classes sharing one request-scoped session:

- ``SqlProgressRecordStore``: append-only scoring log.
- ``SqlStreakStore``: one row per user, written with a version check so two
  concurrent requests cannot both apply a transition to the same read.
- ``SqlAchievementStore``: unique ``(user_id, title)``; a duplicate insert is
  reported as "already unlocked", not as an error.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.practice.errors import StaleStreakError
from core.practice.pitch import parse_pitch_samples, samples_to_dicts
from core.practice.types import Achievement, ProgressRecord, StreakState
from db.models import AchievementRow, ProgressRecordRow, StreakRow
from ingestion.sql_errors import persistence_guard

logger = logging.getLogger(__name__)


def _row_to_record(row: ProgressRecordRow) -> ProgressRecord:
    return ProgressRecord(
        record_id=row.id,
        user_id=row.user_id,
        reference_kind=row.reference_kind,  # type: ignore[arg-type]
        reference_id=row.reference_id,
        user_pitch_data=parse_pitch_samples(row.user_pitch_data),
        reference_pitch_data=parse_pitch_samples(row.reference_pitch_data),
        total_entries=row.total_entries,
        total_matches=row.total_matches,
        accuracy=row.accuracy,
        created_at=row.created_at,
    )


def _row_to_streak(row: StreakRow) -> StreakState:
    return StreakState(
        user_id=row.user_id,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_practice_date=row.last_practice_date,
        version=row.version,
    )


def _row_to_achievement(row: AchievementRow) -> Achievement:
    return Achievement(
        achievement_id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        unlocked_at=row.unlocked_at,
    )


class SqlProgressRecordStore:
    """Append-only log of scoring attempts."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, record: ProgressRecord) -> ProgressRecord:
        """Persist a record; the returned copy carries its id and timestamp."""
        created_at = record.created_at or datetime.now(UTC)
        row = ProgressRecordRow(
            user_id=record.user_id,
            reference_kind=record.reference_kind,
            reference_id=record.reference_id,
            user_pitch_data=samples_to_dicts(record.user_pitch_data),
            reference_pitch_data=samples_to_dicts(record.reference_pitch_data),
            total_entries=record.total_entries,
            total_matches=record.total_matches,
            accuracy=record.accuracy,
            created_at=created_at,
        )
        with persistence_guard(self._session, "append progress record"):
            self._session.add(row)
            self._session.commit()
        return replace(record, record_id=row.id, created_at=created_at)

    def list_by_user(self, user_id: str, newest_first: bool = True) -> list[ProgressRecord]:
        """Return a user's records ordered by creation (newest first by default)."""
        order = ProgressRecordRow.id.desc() if newest_first else ProgressRecordRow.id.asc()
        stmt = select(ProgressRecordRow).where(ProgressRecordRow.user_id == user_id).order_by(order)
        with persistence_guard(self._session, "list progress records"):
            rows = list(self._session.scalars(stmt))
        return [_row_to_record(r) for r in rows]


class SqlStreakStore:
    """Per-user StreakState with optimistic concurrency.

    ``StreakState.version`` is the version the caller read. Version 0 means
    the caller saw no row and wants to insert; the unique ``user_id`` column
    turns a racing insert into ``StaleStreakError``. Otherwise the UPDATE
    only matches the row if its version is unchanged.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> StreakState | None:
        stmt = select(StreakRow).where(StreakRow.user_id == user_id)
        with persistence_guard(self._session, "get streak"):
            row = self._session.scalars(stmt).one_or_none()
            # Drop the identity-map copy so a retry after a lost race re-reads.
            if row is not None:
                self._session.expunge(row)
        return _row_to_streak(row) if row is not None else None

    def upsert(self, state: StreakState) -> StreakState:
        """Write ``state`` conditionally on ``state.version``.

        Returns:
            The written state with its new version.

        Raises:
            StaleStreakError: If the stored row changed since it was read.
            PersistenceError: On any other database failure.
        """
        if state.version == 0:
            return self._insert(state)

        stmt = (
            update(StreakRow)
            .where(StreakRow.user_id == state.user_id, StreakRow.version == state.version)
            .values(
                current_streak=state.current_streak,
                longest_streak=state.longest_streak,
                last_practice_date=state.last_practice_date,
                version=state.version + 1,
            )
        )
        with persistence_guard(self._session, "update streak"):
            result = self._session.execute(stmt)
            if result.rowcount == 0:
                self._session.rollback()
                raise StaleStreakError(state.user_id, state.version)
            self._session.commit()
        return replace(state, version=state.version + 1)

    def _insert(self, state: StreakState) -> StreakState:
        row = StreakRow(
            user_id=state.user_id,
            current_streak=state.current_streak,
            longest_streak=state.longest_streak,
            last_practice_date=state.last_practice_date,
            version=1,
        )
        with persistence_guard(self._session, "insert streak"):
            try:
                self._session.add(row)
                self._session.commit()
            except IntegrityError as exc:
                self._session.rollback()
                raise StaleStreakError(state.user_id, 0) from exc
            self._session.expunge(row)
        return replace(state, version=1)


class SqlAchievementStore:
    """Unlocked achievements, unique per ``(user_id, title)``."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def exists(self, user_id: str, title: str) -> bool:
        stmt = select(AchievementRow.id).where(
            AchievementRow.user_id == user_id, AchievementRow.title == title
        )
        with persistence_guard(self._session, "check achievement"):
            return self._session.scalars(stmt).first() is not None

    def append(self, achievement: Achievement) -> Achievement | None:
        """Insert an achievement.

        Returns:
            The stored achievement, or None if the user already held the title
            (including when a concurrent request inserted it first).
        """
        row = AchievementRow(
            user_id=achievement.user_id,
            title=achievement.title,
            description=achievement.description,
            unlocked_at=achievement.unlocked_at,
        )
        with persistence_guard(self._session, "append achievement"):
            try:
                self._session.add(row)
                self._session.commit()
            except IntegrityError:
                self._session.rollback()
                logger.info(
                    "Achievement %r already unlocked for user %s",
                    achievement.title,
                    achievement.user_id,
                )
                return None
        return replace(achievement, achievement_id=row.id)

    def list_by_user(self, user_id: str) -> list[Achievement]:
        """Return a user's achievements, most recent first."""
        stmt = (
            select(AchievementRow)
            .where(AchievementRow.user_id == user_id)
            .order_by(AchievementRow.id.desc())
        )
        with persistence_guard(self._session, "list achievements"):
            rows = list(self._session.scalars(stmt))
        return [_row_to_achievement(r) for r in rows]
