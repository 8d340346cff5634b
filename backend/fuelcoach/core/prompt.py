"""System Prompt - Render a CoachingContext as the model's system prompt.

Plain text in, plain text out. The prompt is regenerated on every call, so
there is no versioning of its layout.
"""

from datetime import date

from .insights import MAX_ACTIVE_INSIGHTS
from .models import CoachingContext, DailySnapshot, Meal, ProgressState, Workout
from .progress import quick_wins, tip_of_the_day


GUIDELINES = f"""## Guidelines
- When the user mentions food they ate, use log_meal to record it. Estimate macros if not provided.
- When they mention exercise, use log_workout to record it.
- When they mention their weight, use log_weight to record it.
- Provide brief, encouraging feedback after logging.
- Ground coaching in the history above: cite patterns and numbers rather than generic advice.
- For queries about past data, use the appropriate query tools.
- Add insights sparingly - only for patterns observed over 3+ days or stated long-term preferences.
- If at {MAX_ACTIVE_INSIGHTS} active insights and need to add one, deactivate a less relevant one first.
- Keep responses concise and conversational.
- When estimating calories/macros, be reasonable and explain your estimation briefly."""

NUTRITION_REFERENCE = """## Nutrition Reference (for estimation)
- Protein powder: ~10g protein per scoop (most plant-based), ~25g protein per scoop (whey). Scale for multiple scoops.
- When the user specifies scoops/servings, multiply per-scoop values rather than estimating the total."""

TONE_BY_STATE = {
    ProgressState.VICTORY: "Both targets are hit. Celebrate briefly and keep it light.",
    ProgressState.ALMOST: "Close to both targets. Point out the small gap and how to close it.",
    ProgressState.ON_TRACK: "Normal progress. Be supportive and practical.",
    ProgressState.STRUGGLING: "Evening and well short. Be kind, suggest one realistic fix, no guilt.",
    ProgressState.FRESH_START: "Early in the day with little logged. Set up a strong start.",
}


def _fmt(value: float) -> str:
    return f"{round(value)}"


def _format_date(day: date) -> str:
    return f"{day:%A, %B} {day.day}, {day.year}"


def _format_height(inches: float | None) -> str:
    if not inches:
        return "Not set"
    whole = int(round(inches))
    return f"{whole // 12}'{whole % 12}\""


def _format_meal(meal: Meal) -> str:
    label = meal.time_of_day.value if meal.time_of_day else "meal"
    return (
        f"- {meal.name} ({label}): {_fmt(meal.calories or 0)} kcal, "
        f"P:{_fmt(meal.protein or 0)}g C:{_fmt(meal.carbs or 0)}g F:{_fmt(meal.fat or 0)}g [ID: {meal.id}]"
    )


def _format_workout(workout: Workout) -> str:
    line = f"- {workout.exercise or 'Workout'}"
    if workout.type:
        line += f" ({workout.type.value})"
    if workout.duration_minutes:
        line += f": {_fmt(workout.duration_minutes)} min"
    if workout.sets and workout.reps:
        line += f": {workout.sets}x{workout.reps}"
    if workout.calories_burned:
        line += f", ~{_fmt(workout.calories_burned)} cal burned"
    return line


def _format_day(day: DailySnapshot) -> str:
    mark = "hit" if day.hit_both_targets else "missed"
    return (
        f"- {day.date:%a %m/%d}: {_fmt(day.calories)} kcal, {_fmt(day.protein)}g protein, "
        f"{len(day.workouts)} workout(s) [{mark}]"
    )


def _pct(value: float, target: float) -> int:
    if target <= 0:
        return 100
    return round(value / target * 100)


def build_system_prompt(context: CoachingContext) -> str:
    """Render the coaching context as markdown sections.

    Args:
        context: Output of build_coaching_context

    Returns:
        The system prompt text
    """
    profile = context.profile
    targets = context.targets
    today = context.today
    totals = today.totals

    sections = [
        f"You are a friendly, knowledgeable nutrition and fitness coach helping {context.name} "
        f"achieve their health goals. Today is {_format_date(today.date)}, {today.time_of_day}.",
        "\n".join([
            "## User Profile",
            f"- Name: {context.name}",
            f"- Goal: {context.goal.value} weight",
            f"- Height: {_format_height(profile.height_inches)}",
            f"- Starting weight: {profile.start_weight or 'Not set'} lbs",
            f"- Goal weight: {profile.goal_weight or 'Not set'} lbs",
            f"- Starting body fat: {f'{profile.start_bf}%' if profile.start_bf else 'Not set'}",
            f"- Goal body fat: {f'{profile.goal_bf}%' if profile.goal_bf else 'Not set'}",
        ]),
        "\n".join([
            "## Daily Targets",
            f"- Calories: {targets.calories} kcal",
            f"- Protein: {targets.protein}g",
            f"- Carbs: {targets.carbs}g",
            f"- Fat: {targets.fat}g",
        ]),
    ]

    if profile.coaching_notes:
        sections.append(f"## Coaching Notes (from user)\n{profile.coaching_notes}")

    progress = [
        "## Today's Progress",
        f"Calories: {_fmt(totals.calories)}/{targets.calories} kcal ({_pct(totals.calories, targets.calories)}%)",
        f"Protein: {_fmt(totals.protein)}/{targets.protein}g ({_pct(totals.protein, targets.protein)}%)",
        f"Carbs: {_fmt(totals.carbs)}/{targets.carbs}g",
        f"Fat: {_fmt(totals.fat)}/{targets.fat}g",
        f"Remaining: {_fmt(today.remaining_calories)} kcal, {_fmt(today.remaining_protein)}g protein",
        f"Main meals still ahead: {today.meals_remaining}",
    ]
    if today.workout_credit:
        progress.append(
            f"Workout credit: +{today.workout_credit} kcal (half of {_fmt(today.calories_burned)} burned)"
        )
    progress.append(f"Progress state: {context.progress_state.value}. {TONE_BY_STATE[context.progress_state]}")
    sections.append("\n".join(progress))

    if today.meals:
        sections.append("### Today's Meals\n" + "\n".join(_format_meal(m) for m in today.meals))
    else:
        sections.append("No meals logged today yet.")

    if today.workouts:
        sections.append("### Today's Workouts\n" + "\n".join(_format_workout(w) for w in today.workouts))

    weigh_in = context.latest_weigh_in
    if weigh_in:
        body_fat = f" ({weigh_in.body_fat}% BF)" if weigh_in.body_fat else ""
        sections.append(f"### Latest Weigh-in ({weigh_in.date.isoformat()}): {weigh_in.weight} lbs{body_fat}")

    yesterday = context.yesterday
    if yesterday.meals:
        sections.append(
            "## Yesterday\n"
            f"{_fmt(yesterday.calories)} kcal, {_fmt(yesterday.protein)}g protein, "
            f"{_fmt(yesterday.carbs)}g carbs, {_fmt(yesterday.fat)}g fat. "
            f"Calories {'on' if yesterday.hit_calorie_target else 'off'} target, "
            f"protein {'on' if yesterday.hit_protein_target else 'off'} target."
        )
    else:
        sections.append("## Yesterday\nNothing logged.")

    week = context.last_week
    if week.days:
        averages = week.averages
        consistency = week.consistency
        lines = [
            "## Last 7 Days",
            f"- Days tracked: {consistency.days_tracked}",
            f"- Averages: {averages.calories} kcal, {averages.protein}g protein, "
            f"{averages.carbs}g carbs, {averages.fat}g fat",
            f"- Days on calorie target: {consistency.days_hit_calories}/{consistency.days_tracked}",
            f"- Days on protein target: {consistency.days_hit_protein}/{consistency.days_tracked}",
            f"- Days on both: {consistency.days_hit_both}/{consistency.days_tracked}",
            f"- Workouts: {consistency.workout_count}",
            f"- Current streak: {context.streak} day(s)",
        ]
        lines.extend(_format_day(d) for d in week.days)
        sections.append("\n".join(lines))
    else:
        sections.append(f"## Last 7 Days\nNo data from the past week.\n- Current streak: {context.streak} day(s)")

    if week.patterns:
        sections.append("## Patterns Noticed\n" + "\n".join(f"- {p}" for p in week.patterns))

    coaching = [f"- {tip}" for tip in context.coaching_tips]
    protein_short = totals.protein < targets.protein
    wins = quick_wins(context.progress_state, protein_short)
    if wins:
        coaching.append(f"- Quick wins: {', '.join(wins)}")
    coaching.append(f"- Tip of the day: {tip_of_the_day(today.date)}")
    sections.append("## Coaching Angles\n" + "\n".join(coaching))

    if context.insights:
        sections.append(
            f"## What I Remember About {context.name}\n"
            + "\n".join(f"- [{i.category.value}] {i.insight} [ID: {i.id}]" for i in context.insights)
        )

    sections.append(GUIDELINES)
    sections.append(NUTRITION_REFERENCE)

    return "\n\n".join(sections)
