"""
Practice engine: one scoring request, end to end.

Sequential unit of work over the stores:

    validate samples -> resolve user -> resolve reference sequence
    -> score -> append ProgressRecord -> advance streak (optimistic, retried)
    -> unlock achievements (degrades) -> generate suggestions (degrades)

Each store write commits on its own. A failure after the ProgressRecord is
appended does not roll it back.

Example:
    engine = PracticeEngine(
        pitch_store=SqlPitchSeriesStore(session),
        progress_store=SqlProgressRecordStore(session),
        streak_store=SqlStreakStore(session),
        achievement_store=SqlAchievementStore(session),
        user_store=SqlUserStore(session),
    )
    result = engine.submit_comparison("segment", segment_id, user_id, samples)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, date, datetime
from typing import Any

from core.config import DEFAULT_CONFIG, PracticeConfig
from core.practice.achievements import qualifying_achievements
from core.practice.errors import (
    AchievementEvaluationError,
    EmptyComparisonError,
    InvalidPitchDataError,
    NotFoundError,
    PersistenceError,
    StaleStreakError,
)
from core.practice.pitch import parse_pitch_samples, slice_window
from core.practice.scoring import score_attempt
from core.practice.stores import (
    AchievementStore,
    PitchSeriesStore,
    ProgressRecordStore,
    StreakStore,
    UserStore,
)
from core.practice.streak import advance_streak
from core.practice.suggestions import FALLBACK_SUGGESTION, generate_suggestions
from core.practice.types import (
    Achievement,
    ComparisonResult,
    ComparisonScore,
    PitchSample,
    ProgressRecord,
    ReferenceKind,
    StreakState,
    StreakUpdate,
)
from infrastructure.metrics import (
    LatencyTimer,
    record_achievement_unlocked,
    record_comparison,
    record_degraded,
    record_streak_conflict,
    record_streak_transition,
)

logger = logging.getLogger(__name__)

REFERENCE_KINDS: tuple[str, ...] = ("recording", "segment")


class PracticeEngine:
    """Scores pitch attempts and keeps streaks and achievements current.

    Holds no state between calls; every call re-reads the stores.

    Args:
        pitch_store: Source of reference sequences.
        progress_store: Append-only scoring log.
        streak_store: Versioned per-user streak state.
        achievement_store: Unique per-user badges.
        user_store: Used to reject unknown users.
        config: Thresholds and retry bounds.
    """

    def __init__(
        self,
        pitch_store: PitchSeriesStore,
        progress_store: ProgressRecordStore,
        streak_store: StreakStore,
        achievement_store: AchievementStore,
        user_store: UserStore,
        config: PracticeConfig = DEFAULT_CONFIG,
    ) -> None:
        self._pitch = pitch_store
        self._progress = progress_store
        self._streaks = streak_store
        self._achievements = achievement_store
        self._users = user_store
        self._config = config

    def submit_comparison(
        self,
        reference_kind: ReferenceKind,
        reference_id: str,
        user_id: str,
        user_pitch_data: Iterable[Any],
        today: date | None = None,
        now: datetime | None = None,
    ) -> ComparisonResult:
        """
        Score ``user_pitch_data`` against a recording or segment.

        Args:
            reference_kind: "recording" or "segment".
            reference_id: Id of the recording or segment.
            user_id: Id of the singer.
            user_pitch_data: Raw samples (mappings or ``PitchSample``).
            today: Calendar day credited to the streak. Default: host-local today.
            now: Timestamp for new rows. Default: current UTC time.

        Returns:
            ComparisonResult with the stored record, suggestions, streak and
            any achievements unlocked by this attempt.

        Raises:
            InvalidPitchDataError: Malformed samples or unknown reference kind.
            NotFoundError: Unknown user, recording or segment.
            EmptyComparisonError: Nothing to compare.
            PersistenceError: A required store write failed.
        """
        timer = LatencyTimer()
        status = "error"
        try:
            with timer:
                result = self._submit(
                    reference_kind,
                    reference_id,
                    user_id,
                    user_pitch_data,
                    today or date.today(),
                    now or datetime.now(UTC),
                )
            status = "success"
            return result
        except NotFoundError:
            status = "not_found"
            raise
        except EmptyComparisonError:
            status = "empty"
            raise
        except InvalidPitchDataError:
            status = "invalid"
            raise
        finally:
            record_comparison(
                reference_kind=reference_kind,
                status=status,
                latency_seconds=timer.elapsed,
            )

    def _submit(
        self,
        reference_kind: ReferenceKind,
        reference_id: str,
        user_id: str,
        user_pitch_data: Iterable[Any],
        today: date,
        now: datetime,
    ) -> ComparisonResult:
        samples = parse_pitch_samples(user_pitch_data)
        if not self._users.exists(user_id):
            raise NotFoundError("User", user_id)
        reference = self.resolve_reference(reference_kind, reference_id)

        score = score_attempt(samples, reference, self._config)
        record = self._progress.append(
            ProgressRecord(
                user_id=user_id,
                reference_kind=reference_kind,
                reference_id=reference_id,
                user_pitch_data=samples,
                reference_pitch_data=reference,
                total_entries=score.total_entries,
                total_matches=score.total_matches,
                accuracy=score.accuracy_label,
                created_at=now,
            )
        )
        logger.info(
            "User %s scored %s on %s %s (%d/%d)",
            user_id,
            record.accuracy,
            reference_kind,
            reference_id,
            score.total_matches,
            score.total_entries,
        )

        previous, update = self._advance_streak(user_id, today)
        previous_longest = previous.longest_streak if previous is not None else None

        try:
            unlocked = self._unlock_achievements(
                user_id, score, update.state, previous_longest, now
            )
        except AchievementEvaluationError as exc:
            record_degraded("achievements")
            logger.warning("Skipping achievements for user %s: %s", user_id, exc)
            unlocked = ()

        suggestions = generate_suggestions(
            score.rounded_accuracy,
            update.state,
            samples,
            reference,
            previous_longest=previous_longest,
            config=self._config,
        )
        if suggestions == [FALLBACK_SUGGESTION]:
            record_degraded("suggestions")

        return ComparisonResult(
            progress_record=record,
            suggestions=tuple(suggestions),
            streak=update.state,
            unlocked=unlocked,
        )

    def resolve_reference(
        self, reference_kind: ReferenceKind, reference_id: str
    ) -> tuple[PitchSample, ...]:
        """Return the reference sequence for a recording or a segment window.

        Raises:
            InvalidPitchDataError: If ``reference_kind`` is not recognised.
            NotFoundError: If the recording or segment does not exist.
        """
        if reference_kind == "recording":
            return self._pitch.get_pitch_sequence(reference_id)
        if reference_kind == "segment":
            window = self._pitch.get_segment(reference_id)
            return slice_window(self._pitch.get_pitch_sequence(window.recording_id), window)
        raise InvalidPitchDataError(
            f"reference_kind must be one of {list(REFERENCE_KINDS)}, got {reference_kind!r}"
        )

    def _advance_streak(
        self, user_id: str, today: date
    ) -> tuple[StreakState | None, StreakUpdate]:
        """Apply today's practice to the user's streak.

        Re-reads and re-applies the transition when a concurrent request
        wins the conditional write, so two same-day requests never both
        increment.

        Returns:
            ``(state before this event, update applied)``.

        Raises:
            PersistenceError: When every attempt lost its race, or a store fails.
        """
        attempts = self._config.max_streak_write_attempts
        for attempt in range(1, attempts + 1):
            previous = self._streaks.get(user_id)
            update = advance_streak(previous, user_id, today)
            if not update.changed:
                record_streak_transition(update.transition)
                return previous, update
            try:
                stored = self._streaks.upsert(update.state)
            except StaleStreakError:
                record_streak_conflict()
                logger.warning(
                    "Streak write conflict for user %s (attempt %d/%d)", user_id, attempt, attempts
                )
                continue
            record_streak_transition(update.transition)
            logger.info(
                "Streak %s for user %s: current=%d longest=%d",
                update.transition,
                user_id,
                stored.current_streak,
                stored.longest_streak,
            )
            return previous, replace(update, state=stored)
        raise PersistenceError(
            f"streak for user {user_id!r} kept changing; gave up after {attempts} attempts"
        )

    def _unlock_achievements(
        self,
        user_id: str,
        score: ComparisonScore,
        streak: StreakState,
        previous_longest: int | None,
        now: datetime,
    ) -> tuple[Achievement, ...]:
        """Persist every qualifying achievement the user does not hold yet.

        Raises:
            AchievementEvaluationError: If a rule or a store call fails.
        """
        unlocked: list[Achievement] = []
        try:
            for title, description in qualifying_achievements(score, streak, previous_longest):
                if self._achievements.exists(user_id, title):
                    continue
                stored = self._achievements.append(
                    Achievement(
                        user_id=user_id,
                        title=title,
                        description=description,
                        unlocked_at=now,
                    )
                )
                if stored is None:
                    continue
                unlocked.append(stored)
                record_achievement_unlocked(title)
                logger.info("Achievement %r unlocked for user %s", title, user_id)
        except Exception as exc:
            raise AchievementEvaluationError(f"{type(exc).__name__}: {exc}") from exc
        return tuple(unlocked)
