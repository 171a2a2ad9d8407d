"""
Configuration for the practice engine.

``PracticeConfig`` is an immutable object passed explicitly to the scorer,
suggestion generator and engine, so thresholds never hide in function
bodies. ``PracticeConfig.from_env()`` is the only place that reads the
environment.

Environment variables
---------------------
``PRACTICE_MATCH_TOLERANCE_HZ``
    Max absolute frequency difference counted as a match (default ``3.0``).

``PRACTICE_FLUCTUATION_THRESHOLD_HZ``
    Difference above which the pitch-control warning fires (default ``10.0``).

``PRACTICE_MAX_STREAK_WRITE_ATTEMPTS``
    Optimistic streak write attempts before giving up (default ``3``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class PracticeConfig:
    """
    Thresholds used by scoring, suggestions and streak persistence.

    Attributes:
        match_tolerance_hz: A pair matches iff ``|Δf| <= match_tolerance_hz``.
        fluctuation_threshold_hz: A pair counts as a large fluctuation iff
            ``|Δf| > fluctuation_threshold_hz``.
        close_accuracy: Lower bound of the "getting close" accuracy band.
        mastery_accuracy: Lower bound of the "great job" accuracy band.
        short_streak_days: First streak encouragement tier boundary.
        long_streak_days: Second streak encouragement tier boundary.
        max_streak_write_attempts: Conditional-write attempts for StreakState.

    Example:
        >>> config = PracticeConfig(match_tolerance_hz=5.0)
        >>> score = score_attempt(user, reference, config=config)
    """

    match_tolerance_hz: float = 3.0
    fluctuation_threshold_hz: float = 10.0
    close_accuracy: float = 70.0
    mastery_accuracy: float = 90.0
    short_streak_days: int = 7
    long_streak_days: int = 30
    max_streak_write_attempts: int = 3

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.match_tolerance_hz < 0:
            raise ValueError(
                f"match_tolerance_hz must be non-negative, got {self.match_tolerance_hz}"
            )
        if self.fluctuation_threshold_hz < 0:
            raise ValueError(
                "fluctuation_threshold_hz must be non-negative, "
                f"got {self.fluctuation_threshold_hz}"
            )
        if not 0 <= self.close_accuracy <= self.mastery_accuracy <= 100:
            raise ValueError(
                "accuracy bands must satisfy 0 <= close_accuracy <= mastery_accuracy <= 100, "
                f"got {self.close_accuracy} and {self.mastery_accuracy}"
            )
        if not 0 < self.short_streak_days < self.long_streak_days:
            raise ValueError(
                "streak tiers must satisfy 0 < short_streak_days < long_streak_days, "
                f"got {self.short_streak_days} and {self.long_streak_days}"
            )
        if self.max_streak_write_attempts < 1:
            raise ValueError(
                "max_streak_write_attempts must be at least 1, "
                f"got {self.max_streak_write_attempts}"
            )

    @classmethod
    def from_env(cls) -> PracticeConfig:
        """Build a config from ``PRACTICE_*`` variables (``.env`` is loaded first)."""
        load_dotenv()
        defaults = cls()
        return cls(
            match_tolerance_hz=float(
                os.getenv("PRACTICE_MATCH_TOLERANCE_HZ", str(defaults.match_tolerance_hz))
            ),
            fluctuation_threshold_hz=float(
                os.getenv(
                    "PRACTICE_FLUCTUATION_THRESHOLD_HZ",
                    str(defaults.fluctuation_threshold_hz),
                )
            ),
            max_streak_write_attempts=int(
                os.getenv(
                    "PRACTICE_MAX_STREAK_WRITE_ATTEMPTS",
                    str(defaults.max_streak_write_attempts),
                )
            ),
        )


DEFAULT_CONFIG = PracticeConfig()
"""Default configuration: 3 Hz match tolerance, 10 Hz fluctuation threshold."""
