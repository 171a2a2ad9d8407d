"""
Achievement Evaluator: rule catalog for one-time badges.

Pure: decides which titles a scoring event qualifies for. The engine checks
which of those the user already holds and persists the rest; the store's
unique ``(user_id, title)`` constraint makes unlocking idempotent even under
concurrent requests.

"Longest Streak" compares against the longest streak captured *before* the
Streak Tracker ran. After the tracker's own ``max()`` update the post-update
values can never satisfy ``current > longest``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from core.practice.types import ComparisonScore, StreakState

ACCURACY_MASTER = "Accuracy Master"
SEVEN_DAY_STREAK = "7-Day Streak"
THIRTY_DAY_STREAK = "30-Day Streak"
LONGEST_STREAK = "Longest Streak"


@dataclass(frozen=True)
class AchievementContext:
    """Inputs every rule sees."""

    accuracy: float
    """Accuracy rounded to two decimals, as shown to the user."""

    streak: StreakState
    """Streak after this event was applied."""

    previous_longest: int | None
    """Longest streak before this event, or None for a first-ever event."""


@dataclass(frozen=True)
class AchievementRule:
    """One catalog entry."""

    title: str
    condition: Callable[[AchievementContext], bool]
    describe: Callable[[AchievementContext], str]


def _beats_previous_longest(ctx: AchievementContext) -> bool:
    return ctx.previous_longest is not None and ctx.streak.current_streak > ctx.previous_longest


ACHIEVEMENT_CATALOG: tuple[AchievementRule, ...] = (
    AchievementRule(
        title=ACCURACY_MASTER,
        condition=lambda ctx: ctx.accuracy >= 90,
        describe=lambda ctx: "Achieved 90%+ accuracy in a song",
    ),
    AchievementRule(
        title=SEVEN_DAY_STREAK,
        condition=lambda ctx: ctx.streak.current_streak >= 7,
        describe=lambda ctx: "Practiced for 7 consecutive days",
    ),
    AchievementRule(
        title=THIRTY_DAY_STREAK,
        condition=lambda ctx: ctx.streak.current_streak >= 30,
        describe=lambda ctx: "Practiced for 30 consecutive days",
    ),
    AchievementRule(
        title=LONGEST_STREAK,
        condition=_beats_previous_longest,
        describe=lambda ctx: (
            f"Reached your longest streak of {ctx.streak.current_streak} days"
        ),
    ),
)

CATALOG_TITLES: frozenset[str] = frozenset(rule.title for rule in ACHIEVEMENT_CATALOG)


def qualifying_achievements(
    score: ComparisonScore,
    streak: StreakState,
    previous_longest: int | None,
) -> list[tuple[str, str]]:
    """
    Return ``(title, description)`` for every rule this event satisfies.

    Rules are independent; several may qualify at once. Whether the user
    already holds a title is not checked here.

    Args:
        score: The score just computed.
        streak: Streak state after the tracker ran.
        previous_longest: Longest streak before the tracker ran, or None.

    Returns:
        List in catalog order.
    """
    ctx = AchievementContext(
        accuracy=score.rounded_accuracy,
        streak=streak,
        previous_longest=previous_longest,
    )
    return [(rule.title, rule.describe(ctx)) for rule in ACHIEVEMENT_CATALOG if rule.condition(ctx)]
