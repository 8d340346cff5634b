"""Coaching Context - Assemble the bundle the system prompt is rendered from.

All functions are pure: same input always produces same output, no side effects.
The shell fetches rows and resolves the local date and hour; everything else
happens here.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from .aggregation import WORKOUT_FIELDS, daily_totals, sum_fields
from .dates import days_between, meals_remaining, time_of_day
from .models import (
    CoachingContext,
    DailySnapshot,
    DayTotals,
    Insight,
    Meal,
    MealsLogged,
    MealTime,
    Profile,
    Targets,
    TodayStatus,
    WeighIn,
    Workout,
)
from .patterns import is_mealtime
from .progress import classify_progress
from .snapshots import build_weekly_snapshot, build_window_snapshots, empty_snapshot
from .streaks import compute_streaks
from .targets import ToleranceScheme, evaluate_day, resolve_goal, resolve_targets


WORKOUT_CREDIT_RATIO = 0.5
MAX_COACHING_TIPS = 3
NO_WORKOUT_SENTINEL = 999


def build_today_status(
    snapshot: DailySnapshot, hour: int, targets: Targets
) -> TodayStatus:
    """Live view of today from its snapshot and the current local hour.

    Half of the calories burned in workouts is credited back to the
    calorie budget.
    """
    calories_burned = sum_fields(snapshot.workouts, WORKOUT_FIELDS)["calories_burned"]
    workout_credit = round(calories_burned * WORKOUT_CREDIT_RATIO)

    meals_logged = MealsLogged(
        breakfast=any(is_mealtime(m, MealTime.BREAKFAST) for m in snapshot.meals),
        lunch=any(is_mealtime(m, MealTime.LUNCH) for m in snapshot.meals),
        dinner=any(is_mealtime(m, MealTime.DINNER) for m in snapshot.meals),
        snacks=sum(1 for m in snapshot.meals if is_mealtime(m, MealTime.SNACK)),
    )

    totals = DayTotals(
        calories=snapshot.calories,
        protein=snapshot.protein,
        carbs=snapshot.carbs,
        fat=snapshot.fat,
    )

    return TodayStatus(
        date=snapshot.date,
        hour=hour,
        time_of_day=time_of_day(hour),
        meals=snapshot.meals,
        workouts=snapshot.workouts,
        totals=totals,
        remaining_calories=targets.calories + workout_credit - snapshot.calories,
        remaining_protein=targets.protein - snapshot.protein,
        meals_remaining=meals_remaining(hour),
        meals_logged=meals_logged,
        calories_burned=calories_burned,
        workout_credit=workout_credit,
    )


def days_since_last_workout(workouts: Iterable[Workout], today: date) -> tuple[int, Optional[Workout]]:
    """Days since the most recent workout on or before today.

    Returns:
        (days, workout); (NO_WORKOUT_SENTINEL, None) if there is none
    """
    past = [w for w in workouts if w.date <= today]
    if not past:
        return NO_WORKOUT_SENTINEL, None
    latest = max(past, key=lambda w: (w.date, w.created_at))
    return days_between(latest.date, today), latest


def _body_split(workout: Optional[Workout]) -> Optional[str]:
    if workout is None:
        return None
    label = " ".join(filter(None, [workout.exercise, workout.notes])).lower()
    if "upper" in label:
        return "upper"
    if "lower" in label:
        return "lower"
    return None


def generate_coaching_tips(
    yesterday: DailySnapshot,
    days_since_workout: int,
    last_workout: Optional[Workout],
    average_protein_deficit: float,
    streak: int,
) -> list[str]:
    """Short, actionable nudges for the coach to draw on.

    Args:
        yesterday: Yesterday's snapshot
        days_since_workout: Days since the last workout (999 if none)
        last_workout: The most recent workout, if any
        average_protein_deficit: Target minus average protein over tracked days
        streak: Current streak

    Returns:
        At most MAX_COACHING_TIPS tips, never empty
    """
    tips = []

    if yesterday.meals:
        calorie_diff = yesterday.calories - yesterday.target_calories
        if calorie_diff > 200:
            tips.append(
                f"You were {round(calorie_diff)} cal over yesterday. "
                "A lighter breakfast could help balance things out."
            )
        elif calorie_diff < -300:
            tips.append("You were under target yesterday. Don't skip meals today.")

    split = _body_split(last_workout)
    if 3 <= days_since_workout < NO_WORKOUT_SENTINEL:
        tips.append(
            f"You haven't trained in {days_since_workout} days. "
            "Good day for a workout if you're feeling it."
        )
    elif days_since_workout == 1 and split == "upper":
        tips.append("Lower body day? You did upper yesterday.")
    elif days_since_workout == 1 and split == "lower":
        tips.append("Upper body day? You did lower yesterday.")

    if average_protein_deficit > 20:
        tips.append(
            f"You've been averaging {round(average_protein_deficit)}g under on protein. "
            "Try front-loading it at breakfast."
        )

    if streak >= 3:
        tips.append(f"{streak} days strong. Keep the momentum going.")

    if not tips:
        tips.append("Focus on hitting your protein early. It's easier than catching up at dinner.")

    return tips[:MAX_COACHING_TIPS]


def build_coaching_context(
    profile: Profile,
    meals: Sequence[Meal],
    workouts: Sequence[Workout],
    today: date,
    hour: int,
    insights: Sequence[Insight] = (),
    latest_weigh_in: Optional[WeighIn] = None,
    latest_workout: Optional[Workout] = None,
) -> CoachingContext:
    """Build the full coaching bundle for one request.

    Meals may reach further back than the weekly window; the extra history
    only feeds the streak. Workouts only need the weekly window; the gap since
    training comes from latest_workout, which may be older.

    Args:
        profile: The user's profile
        meals: Meals from the streak lookback window through today
        workouts: Workouts from at least the weekly window
        today: The user's local calendar day
        hour: The user's local hour, 0-23
        insights: Active remembered insights
        latest_weigh_in: Most recent weigh-in, if any
        latest_workout: Most recent workout on or before today, of any age

    Returns:
        CoachingContext ready for prompt rendering
    """
    targets = resolve_targets(profile)
    goal = resolve_goal(profile)

    window = build_window_snapshots(meals, workouts, today, targets)
    today_snapshot = window[0]
    yesterday = window[1] if len(window) > 1 else empty_snapshot(today - timedelta(days=1), targets)
    last_week = build_weekly_snapshot(window, today, targets)

    streak = compute_streaks(
        daily_totals(meals), today, profile.daily_calories, profile.daily_protein, goal
    ).current_streak

    today_status = build_today_status(today_snapshot, hour, targets)
    progress_state = classify_progress(
        today_status.totals.calories,
        today_status.totals.protein,
        targets.calories,
        targets.protein,
        hour,
    )

    protein_deficit = 0.0
    if last_week.days:
        protein_deficit = targets.protein - last_week.averages.protein
    history = list(workouts)
    if latest_workout is not None:
        history.append(latest_workout)
    since_workout, last_workout = days_since_last_workout(history, today)

    return CoachingContext(
        profile=profile,
        name=profile.name or "there",
        goal=goal,
        targets=targets,
        today=today_status,
        yesterday=yesterday,
        last_week=last_week,
        streak=streak,
        progress_state=progress_state,
        coaching_tips=generate_coaching_tips(
            yesterday, since_workout, last_workout, protein_deficit, streak
        ),
        insights=[i for i in insights if i.active],
        latest_weigh_in=latest_weigh_in,
    )


def contextual_greeting(
    name: str,
    streak: int,
    calories: float,
    protein: float,
    targets: Targets,
    hour: int,
) -> str:
    """Opening line for the chat, keyed off the hour and live progress."""
    calories_left = round(targets.calories - calories)
    protein_left = round(targets.protein - protein)
    live = evaluate_day(
        DayTotals(calories=calories, protein=protein),
        targets.calories,
        targets.protein,
        ToleranceScheme.LIVE,
    )

    if live.hit_both:
        if streak > 1:
            return f"{streak} days in a row, {name}! You've already hit your targets today. Anything else to log?"
        return f"You crushed it today, {name}! All targets hit. Anything else to log?"

    if hour < 12:
        if streak > 0:
            return f"Good morning {name}! You're on a {streak}-day streak. What's for breakfast?"
        if calories == 0:
            return f"Good morning {name}! Let's start the day strong. What's for breakfast?"
        return f"Morning {name}! You've logged {round(calories)} cal so far. What else have you had?"

    if hour < 17:
        if protein_left > 50:
            return f"Hey {name}! You've got {protein_left}g protein to go. What did you have for lunch?"
        if calories_left < 0:
            return (
                f"Hey {name}! You're {abs(calories_left)} cal over target. "
                "Not a big deal, just something to keep in mind for dinner."
            )
        return f"Afternoon {name}! Solid progress, {round(protein)}g protein so far. What's next?"

    if hour < 22:
        if 0 < protein_left <= 40:
            return (
                f"Almost there {name}! Just {protein_left}g protein away from your target. "
                "A Greek yogurt or protein shake would do it!"
            )
        if protein_left > 40:
            return f"Evening {name}! You need {protein_left}g more protein. What's for dinner?"
        if not live.hit_calories and calories_left > 0:
            return f"Hey {name}! You've hit protein but have {calories_left} cal left. Room for a good dinner!"
        return f"Hey {name}! How's the evening going?"

    if calories == 0:
        return f"Hey {name}! Logging yesterday's meals, or a late night snack?"
    return f"Late night, {name}? Let me know what you had."
