"""Snapshot Building - Daily and rolling-window views over logged rows.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date
from typing import Iterable

from .aggregation import group_by_date, sum_meals
from .dates import last_n_days
from .models import (
    Consistency,
    DailySnapshot,
    Meal,
    Targets,
    WeeklyAverages,
    WeeklySnapshot,
    Workout,
)
from .patterns import detect_patterns
from .targets import ToleranceScheme, evaluate_day


# Today plus the seven previous days.
WEEKLY_WINDOW_DAYS = 8


def empty_snapshot(day: date, targets: Targets) -> DailySnapshot:
    """All-zero snapshot for a date with nothing logged."""
    return DailySnapshot(
        date=day,
        target_calories=targets.calories,
        target_protein=targets.protein,
    )


def build_daily_snapshot(
    day: date,
    meals: list[Meal],
    workouts: list[Workout],
    targets: Targets,
) -> DailySnapshot:
    """Build one day's snapshot, evaluated with the coaching scheme.

    Args:
        day: The calendar date
        meals: Meals logged on that date
        workouts: Workouts logged on that date
        targets: Targets with defaults applied

    Returns:
        DailySnapshot; a day with no meals has every hit flag false
    """
    if not meals:
        snapshot = empty_snapshot(day, targets)
        snapshot.workouts = list(workouts)
        return snapshot

    totals = sum_meals(meals)
    evaluation = evaluate_day(totals, targets.calories, targets.protein, ToleranceScheme.COACHING)

    return DailySnapshot(
        date=day,
        calories=totals.calories,
        protein=totals.protein,
        carbs=totals.carbs,
        fat=totals.fat,
        target_calories=targets.calories,
        target_protein=targets.protein,
        hit_calorie_target=evaluation.hit_calories,
        hit_protein_target=evaluation.hit_protein,
        hit_both_targets=evaluation.hit_both,
        meals=list(meals),
        workouts=list(workouts),
    )


def build_window_snapshots(
    meals: Iterable[Meal],
    workouts: Iterable[Workout],
    today: date,
    targets: Targets,
    window_days: int = WEEKLY_WINDOW_DAYS,
) -> list[DailySnapshot]:
    """One snapshot per calendar day in the window, most recent first.

    Rows dated outside the window are ignored.
    """
    meals_by_date = group_by_date(meals)
    workouts_by_date = group_by_date(workouts)

    return [
        build_daily_snapshot(
            day,
            meals_by_date.get(day, []),
            workouts_by_date.get(day, []),
            targets,
        )
        for day in last_n_days(today, window_days)
    ]


def _rounded_avg(values: list[float]) -> int:
    if not values:
        return 0
    return round(sum(values) / len(values))


def summarize_tracked_days(days: list[DailySnapshot]) -> tuple[WeeklyAverages, Consistency]:
    """Averages and consistency counters over tracked days."""
    averages = WeeklyAverages(
        calories=_rounded_avg([d.calories for d in days]),
        protein=_rounded_avg([d.protein for d in days]),
        carbs=_rounded_avg([d.carbs for d in days]),
        fat=_rounded_avg([d.fat for d in days]),
    )
    consistency = Consistency(
        days_hit_calories=sum(1 for d in days if d.hit_calorie_target),
        days_hit_protein=sum(1 for d in days if d.hit_protein_target),
        days_hit_both=sum(1 for d in days if d.hit_both_targets),
        workout_count=sum(len(d.workouts) for d in days),
        days_tracked=len(days),
    )
    return averages, consistency


def build_weekly_snapshot(
    window: list[DailySnapshot], today: date, targets: Targets
) -> WeeklySnapshot:
    """Roll a window of snapshots up into the weekly view.

    Only days actually tracked count: today is excluded (still in progress)
    and so is any day with no meals.

    Args:
        window: Snapshots from build_window_snapshots
        today: The user's local calendar day
        targets: Targets with defaults applied

    Returns:
        WeeklySnapshot with tracked days in chronological order
    """
    tracked = sorted(
        (d for d in window if d.date != today and d.meals),
        key=lambda d: d.date,
    )
    averages, consistency = summarize_tracked_days(tracked)

    return WeeklySnapshot(
        days=tracked,
        averages=averages,
        consistency=consistency,
        patterns=detect_patterns(tracked, targets.calories, targets.protein),
    )
