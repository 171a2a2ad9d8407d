"""
Store protocols consumed by the practice engine.

Defines the contracts the engine relies on. This module is pure: concrete
SQLAlchemy implementations live in ``ingestion/``, and tests may substitute
any object with matching methods.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.practice.types import (
    Achievement,
    PitchSample,
    ProgressRecord,
    SegmentWindow,
    StreakState,
)


@runtime_checkable
class PitchSeriesStore(Protocol):
    """Read-only access to reference pitch sequences."""

    def get_pitch_sequence(self, recording_id: str) -> tuple[PitchSample, ...]:
        """
        Return a recording's samples in stored order.

        Raises:
            NotFoundError: If the recording does not exist.
        """
        ...

    def get_segment(self, segment_id: str) -> SegmentWindow:
        """
        Return a segment's window.

        Raises:
            NotFoundError: If the segment does not exist.
        """
        ...


@runtime_checkable
class ProgressRecordStore(Protocol):
    """Append-only log of scoring attempts."""

    def append(self, record: ProgressRecord) -> ProgressRecord:
        """Persist ``record`` and return it with ``record_id`` and ``created_at`` set."""
        ...

    def list_by_user(self, user_id: str, newest_first: bool = True) -> list[ProgressRecord]:
        ...


@runtime_checkable
class StreakStore(Protocol):
    """One StreakState per user, written conditionally on ``version``."""

    def get(self, user_id: str) -> StreakState | None:
        ...

    def upsert(self, state: StreakState) -> StreakState:
        """
        Write ``state`` iff the stored version still equals ``state.version``.

        A version of 0 means "insert". Returns the state with its new version.

        Raises:
            StaleStreakError: If another writer got there first.
        """
        ...


@runtime_checkable
class AchievementStore(Protocol):
    """Unlocked badges, unique per ``(user_id, title)``."""

    def exists(self, user_id: str, title: str) -> bool:
        ...

    def append(self, achievement: Achievement) -> Achievement | None:
        """Persist ``achievement``; return None if the title was already held."""
        ...

    def list_by_user(self, user_id: str) -> list[Achievement]:
        ...


@runtime_checkable
class UserStore(Protocol):
    def exists(self, user_id: str) -> bool:
        ...
