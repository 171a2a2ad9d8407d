"""Tests for core/practice/suggestions.py."""

from datetime import date
from unittest.mock import patch

import pytest

from core.config import PracticeConfig
from core.practice import suggestions as suggestions_module
from core.practice.suggestions import (
    CLOSE_ACCURACY,
    FALLBACK_SUGGESTION,
    HIGH_ACCURACY,
    LONG_STREAK,
    LOW_ACCURACY,
    MEDIUM_STREAK,
    NEW_RECORD,
    PITCH_FLUCTUATION,
    SHORT_STREAK,
    generate_suggestions,
    has_large_fluctuation,
)
from core.practice.types import PitchSample, StreakState


def _seq(*frequencies: float) -> tuple[PitchSample, ...]:
    return tuple(PitchSample(time=float(i), frequency=f) for i, f in enumerate(frequencies))


def _streak(current: int = 1, longest: int = 1) -> StreakState:
    return StreakState(
        user_id="u1",
        current_streak=current,
        longest_streak=longest,
        last_practice_date=date(2026, 3, 10),
    )


STEADY = _seq(440, 445)


class TestAccuracyBand:
    @pytest.mark.parametrize(
        ("accuracy", "expected"),
        [
            (0.0, LOW_ACCURACY),
            (69.99, LOW_ACCURACY),
            (70.0, CLOSE_ACCURACY),
            (89.99, CLOSE_ACCURACY),
            (90.0, HIGH_ACCURACY),
            (100.0, HIGH_ACCURACY),
        ],
    )
    def test_band(self, accuracy: float, expected: str) -> None:
        assert generate_suggestions(accuracy, _streak(), STEADY, STEADY)[0] == expected


class TestStreakTier:
    @pytest.mark.parametrize(
        ("current", "expected"),
        [(1, SHORT_STREAK), (6, SHORT_STREAK), (7, MEDIUM_STREAK), (29, MEDIUM_STREAK), (30, LONG_STREAK)],
    )
    def test_tier(self, current: int, expected: str) -> None:
        result = generate_suggestions(50.0, _streak(current, current), STEADY, STEADY)
        assert result[1] == expected


class TestFluctuationWarning:
    def test_no_warning_within_threshold(self) -> None:
        result = generate_suggestions(50.0, _streak(), _seq(440, 455), _seq(440, 445))
        assert PITCH_FLUCTUATION not in result
        assert len(result) == 3

    def test_warning_above_threshold(self) -> None:
        result = generate_suggestions(50.0, _streak(), _seq(440, 455.5), _seq(440, 445))
        assert result[2] == PITCH_FLUCTUATION
        assert len(result) == 4

    def test_exactly_threshold_is_not_a_fluctuation(self) -> None:
        assert not has_large_fluctuation(_seq(450), _seq(440), 10.0)

    def test_user_samples_past_reference_are_skipped(self) -> None:
        assert not has_large_fluctuation(_seq(440, 1000, 2000), _seq(440), 10.0)

    def test_unvoiced_reference_frames_are_skipped(self) -> None:
        assert not has_large_fluctuation(_seq(300), _seq(0), 10.0)

    def test_custom_threshold(self) -> None:
        config = PracticeConfig(fluctuation_threshold_hz=2.0)
        result = generate_suggestions(50.0, _streak(), _seq(443), _seq(440), config=config)
        assert PITCH_FLUCTUATION in result


class TestClosingMessage:
    def test_states_longest_streak(self) -> None:
        result = generate_suggestions(50.0, _streak(2, 5), STEADY, STEADY, previous_longest=5)
        assert result[-1] == (
            "Your longest streak is 5 days. Try to beat it by practicing consistently."
        )

    def test_new_record_against_previous_longest(self) -> None:
        result = generate_suggestions(50.0, _streak(6, 6), STEADY, STEADY, previous_longest=5)
        assert result[-1] == NEW_RECORD

    def test_first_practice_is_not_a_new_record(self) -> None:
        result = generate_suggestions(50.0, _streak(1, 1), STEADY, STEADY, previous_longest=None)
        assert result[-1].startswith("Your longest streak is 1 days")


class TestFallback:
    def test_internal_failure_returns_single_fallback(self) -> None:
        with patch.object(suggestions_module, "_streak_message", side_effect=TypeError("boom")):
            result = generate_suggestions(50.0, _streak(), STEADY, STEADY)
        assert result == [FALLBACK_SUGGESTION]

    def test_bad_streak_object_returns_fallback(self) -> None:
        result = generate_suggestions(50.0, None, STEADY, STEADY)  # type: ignore[arg-type]
        assert result == [FALLBACK_SUGGESTION]

    def test_any_error_type_returns_fallback(self) -> None:
        class _Unindexable(tuple):
            def __getitem__(self, index):
                raise KeyError("boom")

        reference = _Unindexable(_seq(440))
        result = generate_suggestions(50.0, _streak(), _seq(440), reference)
        assert result == [FALLBACK_SUGGESTION]

    def test_failure_is_logged_with_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        with patch.object(suggestions_module, "_streak_message", side_effect=LookupError("tier")):
            generate_suggestions(50.0, _streak(), STEADY, STEADY)
        (record,) = [r for r in caplog.records if r.name == suggestions_module.__name__]
        assert record.exc_info is not None


def test_full_output_order() -> None:
    result = generate_suggestions(
        95.0, _streak(8, 8), _seq(440, 470), _seq(440, 445), previous_longest=7
    )
    assert result == [HIGH_ACCURACY, MEDIUM_STREAK, PITCH_FLUCTUATION, NEW_RECORD]
    assert result[-1].startswith("You’ve beaten your longest streak!")
