"""
Streak Tracker: per-user daily practice continuity.

Pure state machine. The caller supplies ``today`` (a calendar date, time of
day already discarded) so transitions are deterministic and testable.

Transitions, evaluated in order:
    no prior state          -> created     {1, 1, today}
    last == today           -> unchanged
    today - last == 1 day   -> incremented (longest = max(longest, current))
    anything else           -> reset       (current = 1, longest kept)

"Anything else" includes a ``today`` that falls before the stored date.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

from core.practice.types import StreakState, StreakUpdate

ONE_DAY = timedelta(days=1)


def advance_streak(previous: StreakState | None, user_id: str, today: date) -> StreakUpdate:
    """
    Apply one qualifying practice event to a streak.

    Args:
        previous: Stored state, or None if the user has never practiced.
        user_id: Owner of the streak (used when creating a new state).
        today: Calendar day of the current scoring event.

    Returns:
        StreakUpdate with the new state and the transition taken. The
        returned state keeps ``previous.version`` so the store can make a
        conditional write against it.
    """
    if previous is None:
        return StreakUpdate(
            state=StreakState(
                user_id=user_id,
                current_streak=1,
                longest_streak=1,
                last_practice_date=today,
            ),
            transition="created",
        )

    if previous.last_practice_date == today:
        return StreakUpdate(state=previous, transition="unchanged")

    if today - previous.last_practice_date == ONE_DAY:
        current = previous.current_streak + 1
        return StreakUpdate(
            state=replace(
                previous,
                current_streak=current,
                longest_streak=max(previous.longest_streak, current),
                last_practice_date=today,
            ),
            transition="incremented",
        )

    return StreakUpdate(
        state=replace(previous, current_streak=1, last_practice_date=today),
        transition="reset",
    )
