"""Target Evaluation - Tolerance bands for deciding whether a day "hit".

Three schemes coexist, each used by different callers:

    COACHING  weekly consistency and daily snapshots. Calories must land in
              [90%, 110%] of target whatever the goal; protein >= 90%.
    STREAK    streak counting. Protein >= 90%; calories depend on goal:
              lose -> <= 110%, gain -> >= 90%, maintain -> [90%, 110%].
    LIVE      progress bars and greetings. Simply >= 100% of target.
"""

import re
from enum import Enum
from typing import Optional

from .models import DayTotals, Goal, Profile, TargetEvaluation, Targets


DEFAULT_TARGETS = Targets(calories=2000, protein=150, carbs=200, fat=65)

LOWER_TOLERANCE = 0.9
UPPER_TOLERANCE = 1.1

# Legacy goal encoding inside free-text coaching notes, e.g. "Goal: lose".
_NOTES_GOAL_PATTERN = re.compile(r"Goal:\s*(lose|gain|maintain)", re.IGNORECASE)


class ToleranceScheme(str, Enum):
    COACHING = "coaching"
    STREAK = "streak"
    LIVE = "live"


def resolve_targets(profile: Optional[Profile]) -> Targets:
    """Profile targets with defaults substituted for anything unset.

    Args:
        profile: The user's profile, or None if it could not be loaded

    Returns:
        Targets with no null values
    """
    if profile is None:
        return DEFAULT_TARGETS

    return Targets(
        calories=profile.daily_calories or DEFAULT_TARGETS.calories,
        protein=profile.daily_protein or DEFAULT_TARGETS.protein,
        carbs=profile.daily_carbs or DEFAULT_TARGETS.carbs,
        fat=profile.daily_fat or DEFAULT_TARGETS.fat,
    )


def parse_goal_from_notes(notes: Optional[str]) -> Goal:
    """Read a goal out of free-text coaching notes.

    Back-compat for profiles written before `goal` was its own field.
    Anything unparseable is treated as maintain.
    """
    if not notes:
        return Goal.MAINTAIN
    match = _NOTES_GOAL_PATTERN.search(notes)
    if match is None:
        return Goal.MAINTAIN
    return Goal(match.group(1).lower())


def resolve_goal(profile: Optional[Profile]) -> Goal:
    """The typed goal field wins; coaching notes are the fallback."""
    if profile is None:
        return Goal.MAINTAIN
    if profile.goal is not None:
        return profile.goal
    return parse_goal_from_notes(profile.coaching_notes)


def within_band(value: float, target: float) -> bool:
    return LOWER_TOLERANCE * target <= value <= UPPER_TOLERANCE * target


def _evaluation(hit_calories: bool, hit_protein: bool) -> TargetEvaluation:
    return TargetEvaluation(
        hit_calories=hit_calories,
        hit_protein=hit_protein,
        hit_both=hit_calories and hit_protein,
    )


def evaluate_coaching_day(
    totals: DayTotals, target_calories: float, target_protein: float
) -> TargetEvaluation:
    """Goal-agnostic check used for weekly consistency."""
    return _evaluation(
        within_band(totals.calories, target_calories),
        totals.protein >= LOWER_TOLERANCE * target_protein,
    )


def evaluate_streak_day(
    totals: DayTotals,
    target_calories: float,
    target_protein: float,
    goal: Goal = Goal.MAINTAIN,
) -> TargetEvaluation:
    """Goal-aware check used for streak counting.

    Examples:
        target 2000, goal lose: 2150 passes, 2300 fails.
    """
    if goal == Goal.LOSE:
        hit_calories = totals.calories <= UPPER_TOLERANCE * target_calories
    elif goal == Goal.GAIN:
        hit_calories = totals.calories >= LOWER_TOLERANCE * target_calories
    else:
        hit_calories = within_band(totals.calories, target_calories)

    return _evaluation(hit_calories, totals.protein >= LOWER_TOLERANCE * target_protein)


def evaluate_live_day(
    totals: DayTotals, target_calories: float, target_protein: float
) -> TargetEvaluation:
    """Plain >= 100% check used for live progress."""
    return _evaluation(
        totals.calories >= target_calories,
        totals.protein >= target_protein,
    )


def evaluate_day(
    totals: DayTotals,
    target_calories: float,
    target_protein: float,
    scheme: ToleranceScheme,
    goal: Goal = Goal.MAINTAIN,
) -> TargetEvaluation:
    """Evaluate a day under the named scheme."""
    if scheme == ToleranceScheme.STREAK:
        return evaluate_streak_day(totals, target_calories, target_protein, goal)
    if scheme == ToleranceScheme.LIVE:
        return evaluate_live_day(totals, target_calories, target_protein)
    return evaluate_coaching_day(totals, target_calories, target_protein)
