"""
Suggestion Generator: advisory text derived from one scoring event.

Output order is fixed:
    1. accuracy band
    2. streak tier
    3. pitch-control warning (only when some pair fluctuates too much)
    4. longest-streak comparison

Never raises. Any failure is logged and replaced by ``FALLBACK_SUGGESTION``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.config import DEFAULT_CONFIG, PracticeConfig
from core.practice.errors import SuggestionGenerationError
from core.practice.types import PitchSample, StreakState

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTION = (
    "There was an error generating personalized suggestions. Please try again later."
)

LOW_ACCURACY = (
    "Your accuracy is below 70%. Focus on practicing the difficult parts of the song to improve."
)
CLOSE_ACCURACY = "You're getting close! Keep practicing to boost your accuracy to above 90%."
HIGH_ACCURACY = "Great job! You're achieving high accuracy. Keep it up!"

SHORT_STREAK = "Try to maintain a streak of 7 days to build consistency and improve over time."
MEDIUM_STREAK = (
    "Well done! You've built a solid streak. Aim for a 30-day streak to reach new heights."
)
LONG_STREAK = (
    "You're doing fantastic with your streak! "
    "Keep challenging yourself to beat your longest streak."
)

PITCH_FLUCTUATION = (
    "Your pitch fluctuated significantly in certain sections. "
    "Practice controlling your pitch for better accuracy."
)

NEW_RECORD = (
    "You’ve beaten your longest streak! Keep up the momentum and push for even longer streaks."
)


def _accuracy_message(accuracy: float, config: PracticeConfig) -> str:
    if accuracy < config.close_accuracy:
        return LOW_ACCURACY
    if accuracy < config.mastery_accuracy:
        return CLOSE_ACCURACY
    return HIGH_ACCURACY


def _streak_message(current_streak: int, config: PracticeConfig) -> str:
    if current_streak < config.short_streak_days:
        return SHORT_STREAK
    if current_streak < config.long_streak_days:
        return MEDIUM_STREAK
    return LONG_STREAK


def has_large_fluctuation(
    user_pitch_data: Sequence[PitchSample],
    reference_pitch_data: Sequence[PitchSample],
    threshold_hz: float,
) -> bool:
    """
    True if any index-paired sample differs by more than ``threshold_hz``.

    Indices past the end of the reference are skipped, as are unvoiced
    reference frames (frequency 0), which carry no pitch to compare.
    """
    for index, user in enumerate(user_pitch_data):
        if index >= len(reference_pitch_data):
            break
        reference_frequency = reference_pitch_data[index].frequency
        if reference_frequency and abs(user.frequency - reference_frequency) > threshold_hz:
            return True
    return False


def _closing_message(streak: StreakState, previous_longest: int | None) -> str:
    if previous_longest is not None and streak.current_streak > previous_longest:
        return NEW_RECORD
    return (
        f"Your longest streak is {streak.longest_streak} days. "
        "Try to beat it by practicing consistently."
    )


def _build(
    accuracy: float,
    streak: StreakState,
    user_pitch_data: Sequence[PitchSample],
    reference_pitch_data: Sequence[PitchSample],
    previous_longest: int | None,
    config: PracticeConfig,
) -> list[str]:
    try:
        suggestions = [
            _accuracy_message(accuracy, config),
            _streak_message(streak.current_streak, config),
        ]
        if has_large_fluctuation(
            user_pitch_data, reference_pitch_data, config.fluctuation_threshold_hz
        ):
            suggestions.append(PITCH_FLUCTUATION)
        suggestions.append(_closing_message(streak, previous_longest))
    except Exception as exc:
        raise SuggestionGenerationError(f"{type(exc).__name__}: {exc}") from exc
    return suggestions


def generate_suggestions(
    accuracy: float,
    streak: StreakState,
    user_pitch_data: Sequence[PitchSample],
    reference_pitch_data: Sequence[PitchSample],
    previous_longest: int | None = None,
    config: PracticeConfig = DEFAULT_CONFIG,
) -> list[str]:
    """
    Build the ordered list of suggestions for one scoring event.

    Args:
        accuracy: Accuracy percentage, rounded to two decimals.
        streak: Streak state after this event.
        user_pitch_data: The submitted samples.
        reference_pitch_data: The reference snapshot the user was scored against.
        previous_longest: Longest streak before this event, or None for a
            user with no prior streak (never reported as a new record).
        config: Band and threshold configuration.

    Returns:
        Three or four suggestions, or ``[FALLBACK_SUGGESTION]`` on failure.
    """
    try:
        return _build(
            accuracy, streak, user_pitch_data, reference_pitch_data, previous_longest, config
        )
    except SuggestionGenerationError:
        logger.exception("Suggestion generation failed, using fallback")
        return [FALLBACK_SUGGESTION]
