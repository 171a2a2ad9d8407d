"""
core/practice/types.py: frozen value objects for the practice engine.

All types are immutable and carry no I/O. Stores convert ORM rows to these
objects at their boundary; the scorer, streak tracker, achievement evaluator
and suggestion generator only ever see these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

ReferenceKind = Literal["recording", "segment"]

StreakTransition = Literal["created", "unchanged", "incremented", "reset"]


@dataclass(frozen=True)
class PitchSample:
    """A single time-stamped frequency measurement.

    Invariants (enforced by ``core.practice.pitch.parse_pitch_samples``):
        time >= 0
        frequency >= 0 (0.0 marks an unvoiced frame)
    """

    time: float
    """Seconds from the start of the performance."""

    frequency: float
    """Fundamental frequency in Hz."""


@dataclass(frozen=True)
class SegmentWindow:
    """A named ``[start_time, end_time]`` slice of one recording."""

    segment_id: str
    recording_id: str
    start_time: float
    end_time: float
    name: str = ""

    def __post_init__(self) -> None:
        if self.start_time < 0:
            raise ValueError(f"start_time must be >= 0, got {self.start_time}")
        if self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must not be before start_time ({self.start_time})"
            )


@dataclass(frozen=True)
class ComparisonScore:
    """Outcome of comparing a user sequence against a reference sequence."""

    total_entries: int
    total_matches: int
    accuracy: float
    """Percentage in [0, 100], unrounded."""

    @property
    def accuracy_label(self) -> str:
        """Two-decimal percentage string, e.g. ``"87.50%"``."""
        return f"{self.accuracy:.2f}%"

    @property
    def rounded_accuracy(self) -> float:
        """Accuracy rounded to the two decimals shown to the user."""
        return round(self.accuracy, 2)


@dataclass(frozen=True)
class ProgressRecord:
    """One scoring attempt. Append-only.

    ``reference_pitch_data`` is a snapshot taken at scoring time, so later
    changes to the recording or segment never rewrite history.
    ``record_id`` and ``created_at`` are ``None`` until the store assigns them.
    """

    user_id: str
    reference_kind: ReferenceKind
    reference_id: str
    user_pitch_data: tuple[PitchSample, ...]
    reference_pitch_data: tuple[PitchSample, ...]
    total_entries: int
    total_matches: int
    accuracy: str
    record_id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class StreakState:
    """Per-user practice continuity.

    Invariants:
        1 <= current_streak <= longest_streak
        longest_streak never decreases
    ``version`` is the optimistic-concurrency token; 0 means "never stored".
    """

    user_id: str
    current_streak: int
    longest_streak: int
    last_practice_date: date
    version: int = 0


@dataclass(frozen=True)
class StreakUpdate:
    """Result of one Streak Tracker step."""

    state: StreakState
    transition: StreakTransition

    @property
    def changed(self) -> bool:
        return self.transition != "unchanged"


@dataclass(frozen=True)
class Achievement:
    """A one-time badge, unique per ``(user_id, title)``."""

    user_id: str
    title: str
    description: str
    unlocked_at: datetime
    achievement_id: int | None = None


@dataclass(frozen=True)
class ComparisonResult:
    """Everything a scoring request produces."""

    progress_record: ProgressRecord
    suggestions: tuple[str, ...]
    streak: StreakState
    unlocked: tuple[Achievement, ...] = field(default_factory=tuple)
