"""Exception hierarchy for the practice engine.

Callers at the HTTP edge map these to status codes; nothing in ``core/``
knows about HTTP.
"""

from __future__ import annotations


class PracticeError(Exception):
    """Base class for every error raised by the practice engine."""


class NotFoundError(PracticeError):
    """A referenced user, recording or segment does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier!r}")


class InvalidPitchDataError(PracticeError, ValueError):
    """Pitch samples failed validation at the ingestion boundary."""


class EmptyComparisonError(PracticeError):
    """There are zero index-aligned sample pairs to compare."""

    def __init__(self, user_samples: int, reference_samples: int) -> None:
        self.user_samples = user_samples
        self.reference_samples = reference_samples
        super().__init__(
            "nothing to compare: "
            f"user sequence has {user_samples} samples, "
            f"reference sequence has {reference_samples}"
        )


class PersistenceError(PracticeError):
    """A store operation failed. Not retried by the engine."""


class StaleStreakError(PersistenceError):
    """A conditional streak write lost a race with a concurrent request."""

    def __init__(self, user_id: str, expected_version: int) -> None:
        self.user_id = user_id
        self.expected_version = expected_version
        super().__init__(
            f"streak for user {user_id!r} changed since version {expected_version}"
        )


class AchievementEvaluationError(PracticeError):
    """Unlocking achievements failed; the scoring response still succeeds."""


class SuggestionGenerationError(PracticeError):
    """Building suggestions failed; a fallback message is returned instead."""
