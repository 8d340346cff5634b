"""Pattern Detection - Heuristic findings over a window of tracked days.

All functions are pure: same input always produces same output, no side effects.

Rules run in a fixed priority order and the result is cut to MAX_PATTERNS,
so a higher rule always wins a slot over a lower one.
"""

from typing import Callable, Optional, Sequence

from .dates import is_weekend
from .models import DailySnapshot, Meal, MealTime


MAX_PATTERNS = 4

LOW_BREAKFAST_PROTEIN_G = 20
PROTEIN_SYNTHESIS_THRESHOLD_G = 25
DINNER_SHARE_LIMIT = 0.5
WEEKEND_SPIKE_KCAL = 300
UNDER_TARGET_RATIO = 0.85
WORKOUT_DAY_PROTEIN_RATIO = 0.9
MIN_DAYS_FOR_WEEKLY_RULES = 5
MIN_DAYS_UNDER_TARGET = 4


def _avg(values: Sequence[float]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def is_mealtime(meal: Meal, mealtime: MealTime) -> bool:
    """Whether a meal counts toward a mealtime.

    Either signal is enough: the explicit tag, or the mealtime word appearing
    anywhere in the name ("Breakfast burrito", "post-dinner snack"). A lunch
    named "breakfast tacos" counts as breakfast.
    """
    if meal.time_of_day == mealtime:
        return True
    return mealtime.value in (meal.name or "").lower()


def mealtime_protein(day: DailySnapshot, mealtime: MealTime) -> float:
    return sum(m.protein or 0 for m in day.meals if is_mealtime(m, mealtime))


def _low_breakfast_protein(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    values = [p for p in (mealtime_protein(d, MealTime.BREAKFAST) for d in days) if p > 0]
    if len(values) < 3:
        return None
    average = _avg(values)
    if average >= LOW_BREAKFAST_PROTEIN_G:
        return None
    return (
        f"Breakfast protein averaging {round(average)}g, under the "
        f"{PROTEIN_SYNTHESIS_THRESHOLD_G}g threshold for muscle protein synthesis."
    )


def _dinner_loaded_protein(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    shares = [mealtime_protein(d, MealTime.DINNER) / d.protein for d in days if d.protein > 0]
    if len(shares) < 3:
        return None
    average = _avg(shares)
    if average <= DINNER_SHARE_LIMIT:
        return None
    return f"Dinner carrying {round(average * 100)}% of daily protein. Front-loading would improve absorption."


def _weekend_spike(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    weekend = [d.calories for d in days if is_weekend(d.date)]
    weekday = [d.calories for d in days if not is_weekend(d.date)]
    if len(weekend) < 1 or len(weekday) < 2:
        return None
    difference = _avg(weekend) - _avg(weekday)
    if difference <= WEEKEND_SPIKE_KCAL:
        return None
    return f"Weekends averaging {round(difference)} cal higher than weekdays."


def _chronic_under_eating(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    if len(days) < MIN_DAYS_FOR_WEEKLY_RULES:
        return None
    under = [d for d in days if d.calories < target_calories * UNDER_TARGET_RATIO]
    if len(under) < MIN_DAYS_UNDER_TARGET:
        return None
    return "Under target 4+ days this week. If intentional, great. If not, may be under-fueling."


def _chronic_protein_shortfall(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    if len(days) < MIN_DAYS_FOR_WEEKLY_RULES:
        return None
    low = [d for d in days if d.protein < target_protein * UNDER_TARGET_RATIO]
    if len(low) < MIN_DAYS_UNDER_TARGET:
        return None
    return "Protein under target most days. This limits muscle retention/growth."


def _high_consistency(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    if len(days) < MIN_DAYS_FOR_WEEKLY_RULES:
        return None
    perfect = sum(1 for d in days if d.hit_both_targets)
    if perfect < MIN_DAYS_FOR_WEEKLY_RULES:
        return None
    return f"{perfect}/{len(days)} days on target. Consistency is dialed in."


def _workout_day_protein(days: Sequence[DailySnapshot], target_calories: int, target_protein: int) -> Optional[str]:
    proteins = [d.protein for d in days if d.workouts]
    if len(proteins) < 2:
        return None
    average = _avg(proteins)
    if average >= target_protein * WORKOUT_DAY_PROTEIN_RATIO:
        return None
    return f"Workout days averaging {round(average)}g protein. Aim higher on training days for recovery."


PatternRule = Callable[[Sequence[DailySnapshot], int, int], Optional[str]]

# Priority order.
PATTERN_RULES: tuple[PatternRule, ...] = (
    _low_breakfast_protein,
    _dinner_loaded_protein,
    _weekend_spike,
    _chronic_under_eating,
    _chronic_protein_shortfall,
    _high_consistency,
    _workout_day_protein,
)


def detect_patterns(
    days: Sequence[DailySnapshot], target_calories: int, target_protein: int
) -> list[str]:
    """Scan tracked days for behavioural signals.

    Args:
        days: Tracked days (today excluded, zero-meal days excluded)
        target_calories: Calorie target with defaults applied
        target_protein: Protein target with defaults applied

    Returns:
        Up to MAX_PATTERNS findings, highest priority first
    """
    if not days:
        return []

    findings = []
    for rule in PATTERN_RULES:
        finding = rule(days, target_calories, target_protein)
        if finding is not None:
            findings.append(finding)
    return findings[:MAX_PATTERNS]
