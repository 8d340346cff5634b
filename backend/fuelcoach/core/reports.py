"""Report Generation - Pure functions for generating reports.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date
from typing import Optional, Sequence

from .aggregation import daily_totals, sum_meals
from .models import DailyLogReport, DateRangeSummary, Meal, WeighIn, Workout


def build_daily_log(
    log_date: date,
    meals: Sequence[Meal],
    workouts: Sequence[Workout],
    weigh_in: Optional[WeighIn] = None,
) -> DailyLogReport:
    """Collect everything logged on a single date.

    Args:
        log_date: The date being reported
        meals: Meals logged that day
        workouts: Workouts logged that day
        weigh_in: The day's weigh-in, if any

    Returns:
        DailyLogReport with macro totals
    """
    day_meals = [m for m in meals if m.date == log_date]

    return DailyLogReport(
        date=log_date,
        meals=day_meals,
        workouts=[w for w in workouts if w.date == log_date],
        weigh_in=weigh_in,
        totals=sum_meals(day_meals),
    )


def calculate_weight_change(weigh_ins: Sequence[WeighIn]) -> Optional[float]:
    """Last weigh-in minus first, by date.

    Negative value = weight lost. None with fewer than two weigh-ins.
    """
    if len(weigh_ins) < 2:
        return None
    ordered = sorted(weigh_ins, key=lambda w: w.date)
    return round(ordered[-1].weight - ordered[0].weight, 1)


def summarize_date_range(
    start_date: date,
    end_date: date,
    meals: Sequence[Meal],
    workouts: Sequence[Workout],
    weigh_ins: Sequence[WeighIn],
) -> DateRangeSummary:
    """Aggregate stats for an inclusive date range.

    Averages are per tracked day, not per calendar day, so a range with
    three logged days out of seven averages over three.

    Args:
        start_date: Start of range (inclusive)
        end_date: End of range (inclusive)
        meals: Meals (anything outside the range is ignored)
        workouts: Workouts (anything outside the range is ignored)
        weigh_ins: Weigh-ins (anything outside the range is ignored)

    Returns:
        DateRangeSummary
    """

    def in_range(row) -> bool:
        return start_date <= row.date <= end_date

    totals = daily_totals(m for m in meals if in_range(m))
    days_tracked = len(totals)
    divisor = days_tracked or 1

    return DateRangeSummary(
        start_date=start_date,
        end_date=end_date,
        days_tracked=days_tracked,
        avg_daily_calories=round(sum(t.calories for t in totals.values()) / divisor),
        avg_daily_protein=round(sum(t.protein for t in totals.values()) / divisor),
        workout_count=sum(1 for w in workouts if in_range(w)),
        weight_change=calculate_weight_change([w for w in weigh_ins if in_range(w)]),
    )
