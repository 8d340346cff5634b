"""Hero Stats - Headline numbers for the dashboard.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date
from typing import Optional, Sequence

from .aggregation import daily_totals
from .dates import days_between
from .models import HeroStats, Meal, Profile, WeighIn
from .streaks import compute_streaks
from .targets import resolve_goal


ROLLING_DAYS = 7


def calculate_days_active(start_date: Optional[date], today: date) -> int:
    """Days from start_date through today, counting both ends."""
    if start_date is None:
        return 0
    return max(0, days_between(start_date, today) + 1)


def calculate_weight_changes(
    profile: Profile, latest_weigh_in: Optional[WeighIn]
) -> tuple[Optional[float], Optional[float]]:
    """Weight change since start and distance left to goal.

    Falls back to the starting weight when there is no weigh-in yet.

    Returns:
        (total_change, to_goal), each rounded to one decimal or None
    """
    current = latest_weigh_in.weight if latest_weigh_in else profile.start_weight

    total_change = None
    if current and profile.start_weight:
        total_change = round(current - profile.start_weight, 1)

    to_goal = None
    if current and profile.goal_weight:
        to_goal = round(profile.goal_weight - current, 1)

    return total_change, to_goal


def calculate_rolling_averages(meals: Sequence[Meal]) -> tuple[Optional[int], Optional[int]]:
    """Average calories and protein over the last ROLLING_DAYS logged days.

    Returns:
        (avg_calories, avg_protein), both None when nothing is logged
    """
    totals = daily_totals(meals)
    recent = [totals[d] for d in sorted(totals)[-ROLLING_DAYS:]]
    if not recent:
        return None, None
    return (
        round(sum(t.calories for t in recent) / len(recent)),
        round(sum(t.protein for t in recent) / len(recent)),
    )


def build_hero_stats(
    profile: Profile,
    meals: Sequence[Meal],
    latest_weigh_in: Optional[WeighIn],
    today: date,
) -> HeroStats:
    """Build dashboard headline numbers.

    Args:
        profile: The user's profile
        meals: Meal history to compute streaks and averages from
        latest_weigh_in: Most recent weigh-in, if any
        today: The user's local calendar day

    Returns:
        HeroStats
    """
    streaks = compute_streaks(
        daily_totals(meals),
        today,
        profile.daily_calories,
        profile.daily_protein,
        resolve_goal(profile),
    )
    total_change, to_goal = calculate_weight_changes(profile, latest_weigh_in)
    avg_calories, avg_protein = calculate_rolling_averages(meals)

    return HeroStats(
        current_streak=streaks.current_streak,
        best_streak=streaks.best_streak,
        days_active=calculate_days_active(profile.start_date, today),
        total_weight_change=total_change,
        weight_to_goal=to_goal,
        weekly_avg_calories=avg_calories,
        weekly_avg_protein=avg_protein,
    )
