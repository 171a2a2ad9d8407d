"""
Accuracy Scorer.

Compares a user's pitch samples against a reference sequence by position:
sample ``i`` of one sequence is paired with sample ``i`` of the other,
whatever their timestamps. No time alignment or warping is attempted;
positional pairing is the scoring model, not an approximation of one.
Only the first ``min(len(user), len(reference))`` pairs are compared.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.config import DEFAULT_CONFIG, PracticeConfig
from core.practice.errors import EmptyComparisonError
from core.practice.types import ComparisonScore, PitchSample


def is_match(reference: PitchSample, user: PitchSample, tolerance_hz: float) -> bool:
    """True iff the two frequencies differ by at most ``tolerance_hz`` (inclusive)."""
    return abs(reference.frequency - user.frequency) <= tolerance_hz


def score_attempt(
    user_pitch_data: Sequence[PitchSample],
    reference_pitch_data: Sequence[PitchSample],
    config: PracticeConfig = DEFAULT_CONFIG,
) -> ComparisonScore:
    """
    Score a user sequence against a reference sequence.

    Args:
        user_pitch_data: Samples captured while the user sang.
        reference_pitch_data: Ground truth, already narrowed to the segment
            window when scoring a segment.
        config: Supplies ``match_tolerance_hz``.

    Returns:
        ComparisonScore with total entries, matches and raw accuracy.

    Raises:
        EmptyComparisonError: If either sequence is empty.
    """
    total_entries = min(len(user_pitch_data), len(reference_pitch_data))
    if total_entries == 0:
        raise EmptyComparisonError(len(user_pitch_data), len(reference_pitch_data))

    total_matches = sum(
        1
        for reference, user in zip(reference_pitch_data, user_pitch_data)
        if is_match(reference, user, config.match_tolerance_hz)
    )
    return ComparisonScore(
        total_entries=total_entries,
        total_matches=total_matches,
        accuracy=total_matches / total_entries * 100,
    )
