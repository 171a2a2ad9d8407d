"""Prometheus metrics for the vocal practice platform.

Exposes practice context in metrics so dashboards show how singers are
doing, not just generic HTTP stats.

Metrics:
    vpp_comparisons_total                Counter by reference kind and status
    vpp_comparison_latency_seconds       Histogram of end-to-end scoring latency
    vpp_streak_transitions_total         Counter by transition (created/unchanged/incremented/reset)
    vpp_streak_write_conflicts_total     Optimistic streak writes that lost a race
    vpp_achievements_unlocked_total      Counter by achievement title
    vpp_degraded_steps_total             Achievement/suggestion steps that fell back

Usage::

    from infrastructure.metrics import LatencyTimer, record_comparison

    with LatencyTimer() as t:
        result = engine.submit_comparison(...)
    record_comparison(reference_kind="segment", status="success", latency_seconds=t.elapsed)
"""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_REGISTRY = CollectorRegistry()

comparisons_total = Counter(
    "vpp_comparisons_total",
    "Scoring requests by reference kind and outcome",
    ["reference_kind", "status"],
    registry=_REGISTRY,
)

comparison_latency_seconds = Histogram(
    "vpp_comparison_latency_seconds",
    "End-to-end scoring latency in seconds",
    ["reference_kind"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
    registry=_REGISTRY,
)

streak_transitions_total = Counter(
    "vpp_streak_transitions_total",
    "Streak tracker transitions",
    ["transition"],
    registry=_REGISTRY,
)

streak_write_conflicts_total = Counter(
    "vpp_streak_write_conflicts_total",
    "Conditional streak writes rejected because the row changed",
    registry=_REGISTRY,
)

achievements_unlocked_total = Counter(
    "vpp_achievements_unlocked_total",
    "Achievements unlocked",
    ["title"],
    registry=_REGISTRY,
)

degraded_steps_total = Counter(
    "vpp_degraded_steps_total",
    "Scoring steps that failed and degraded instead of failing the request",
    ["step"],
    registry=_REGISTRY,
)


def record_comparison(
    *,
    reference_kind: str,
    status: str,
    latency_seconds: float | None = None,
) -> None:
    """Record a finished scoring request.

    Args:
        reference_kind: "recording" or "segment".
        status: One of "success", "not_found", "empty", "invalid", "error".
        latency_seconds: Wall-clock time, observed only when given.
    """
    comparisons_total.labels(reference_kind=reference_kind, status=status).inc()
    if latency_seconds is not None:
        comparison_latency_seconds.labels(reference_kind=reference_kind).observe(latency_seconds)


def record_streak_transition(transition: str) -> None:
    streak_transitions_total.labels(transition=transition).inc()


def record_streak_conflict() -> None:
    """Increment the optimistic-write conflict counter."""
    streak_write_conflicts_total.inc()


def record_achievement_unlocked(title: str) -> None:
    achievements_unlocked_total.labels(title=title).inc()


def record_degraded(step: str) -> None:
    """Increment the degraded-step counter.

    Args:
        step: "achievements" or "suggestions".
    """
    degraded_steps_total.labels(step=step).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            result = run_pipeline()
        record_comparison(reference_kind="recording", status="success", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
