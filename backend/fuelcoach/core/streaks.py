"""Streak Engine - Consecutive days meeting targets.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta
from typing import Mapping, Optional

from .models import DayTotals, Goal, StreakState
from .targets import ToleranceScheme, evaluate_day


# How far back the shell fetches meals when refreshing a streak.
STREAK_LOOKBACK_DAYS = 60


def compute_streaks(
    daily_totals: Mapping[date, DayTotals],
    today: date,
    target_calories: Optional[int],
    target_protein: Optional[int],
    goal: Goal = Goal.MAINTAIN,
) -> StreakState:
    """Compute current and best runs of days passing the streak scheme.

    A date missing from `daily_totals` had nothing logged. Missing days break
    a run exactly like failing days, except that an empty today is skipped
    (the day has not started yet) and counting begins from yesterday.

    Args:
        daily_totals: Per-date totals, only for dates with logged meals
        today: The user's local calendar day
        target_calories: Calorie target, None if unset
        target_protein: Protein target in grams, None if unset
        goal: Goal used to pick the calorie band

    Returns:
        StreakState, all zeros when targets are unset
    """
    if not target_calories or not target_protein:
        return StreakState()

    def passes(day: date) -> bool:
        totals = daily_totals.get(day)
        if totals is None:
            return False
        return evaluate_day(
            totals, target_calories, target_protein, ToleranceScheme.STREAK, goal
        ).hit_both

    logged_days = [d for d in daily_totals if d <= today]
    if not logged_days:
        return StreakState()

    best = 0
    run = 0
    day = min(logged_days)
    while day <= today:
        if passes(day):
            run += 1
            best = max(best, run)
        else:
            run = 0
        day += timedelta(days=1)

    current = 0
    day = today
    if today not in daily_totals:
        day -= timedelta(days=1)
    earliest = min(logged_days)
    while day >= earliest and passes(day):
        current += 1
        day -= timedelta(days=1)

    return StreakState(current_streak=current, best_streak=best)
