"""
Parse and validate pitch samples at the ingestion boundary.

Pitch data reaches the service in three shapes: a list of mappings
(JSON request bodies), a list of ``PitchSample`` objects (internal calls),
or a JSON text blob as written by the pitch extractor (possibly with
embedded newlines). Everything past this module works on
``tuple[PitchSample, ...]`` only.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from core.practice.errors import InvalidPitchDataError
from core.practice.types import PitchSample, SegmentWindow


def _coerce_number(value: Any, field_name: str, index: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPitchDataError(
            f"sample {index}: {field_name} must be a number, got {type(value).__name__}"
        )
    number = float(value)
    if not math.isfinite(number):
        raise InvalidPitchDataError(f"sample {index}: {field_name} must be finite")
    if number < 0:
        raise InvalidPitchDataError(f"sample {index}: {field_name} must be >= 0, got {number}")
    return number


def _coerce_sample(raw: Any, index: int) -> PitchSample:
    if isinstance(raw, PitchSample):
        return PitchSample(
            time=_coerce_number(raw.time, "time", index),
            frequency=_coerce_number(raw.frequency, "frequency", index),
        )
    if not isinstance(raw, Mapping):
        raise InvalidPitchDataError(
            f"sample {index}: expected an object with time and frequency, "
            f"got {type(raw).__name__}"
        )
    missing = [key for key in ("time", "frequency") if key not in raw]
    if missing:
        raise InvalidPitchDataError(f"sample {index}: missing {', '.join(missing)}")
    return PitchSample(
        time=_coerce_number(raw["time"], "time", index),
        frequency=_coerce_number(raw["frequency"], "frequency", index),
    )


def parse_pitch_samples(raw: str | Iterable[Any]) -> tuple[PitchSample, ...]:
    """
    Validate raw pitch data and return an immutable sample sequence.

    Order is preserved exactly as given; samples are never sorted.

    Args:
        raw: JSON text, or an iterable of mappings / ``PitchSample`` objects.

    Returns:
        Tuple of validated ``PitchSample`` objects (may be empty).

    Raises:
        InvalidPitchDataError: On malformed JSON, wrong shapes, negative or
            non-finite values.
    """
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        text = text.replace("\n", "").strip()
        if not text:
            return ()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidPitchDataError(f"pitch data is not valid JSON: {exc.msg}") from exc
        if not isinstance(raw, list):
            raise InvalidPitchDataError("pitch data JSON must be an array of samples")
    return tuple(_coerce_sample(item, i) for i, item in enumerate(raw))


def samples_to_dicts(samples: Sequence[PitchSample]) -> list[dict[str, float]]:
    """Serialize samples to JSON-ready dicts."""
    return [{"time": s.time, "frequency": s.frequency} for s in samples]


def slice_window(
    samples: Sequence[PitchSample],
    window: SegmentWindow,
) -> tuple[PitchSample, ...]:
    """Return the samples inside ``window`` (both bounds inclusive), in original order."""
    return tuple(s for s in samples if window.start_time <= s.time <= window.end_time)
