"""Pitch comparison and progress tracking.

Public API:
    parse_pitch_samples : validate raw pitch data into PitchSample tuples
    score_attempt       : index-aligned accuracy scoring
    advance_streak      : daily streak state machine
    qualifying_achievements: achievement rule catalog
    generate_suggestions: advisory text, never raises
"""

from core.practice.achievements import ACHIEVEMENT_CATALOG, qualifying_achievements
from core.practice.errors import (
    EmptyComparisonError,
    InvalidPitchDataError,
    NotFoundError,
    PersistenceError,
    PracticeError,
    StaleStreakError,
)
from core.practice.pitch import parse_pitch_samples, slice_window
from core.practice.scoring import score_attempt
from core.practice.streak import advance_streak
from core.practice.suggestions import generate_suggestions
from core.practice.types import (
    Achievement,
    ComparisonResult,
    ComparisonScore,
    PitchSample,
    ProgressRecord,
    SegmentWindow,
    StreakState,
    StreakUpdate,
)

__all__ = [
    "ACHIEVEMENT_CATALOG",
    "Achievement",
    "ComparisonResult",
    "ComparisonScore",
    "EmptyComparisonError",
    "InvalidPitchDataError",
    "NotFoundError",
    "PersistenceError",
    "PitchSample",
    "PracticeError",
    "ProgressRecord",
    "SegmentWindow",
    "StaleStreakError",
    "StreakState",
    "StreakUpdate",
    "advance_streak",
    "generate_suggestions",
    "parse_pitch_samples",
    "qualifying_achievements",
    "score_attempt",
    "slice_window",
]
