"""MCP Server - Tool definitions the coaching model calls.

Defines the logging, query, memory and coaching-context tools. The profile
for each request is bound by the HTTP layer in a context variable.
"""

import logging
from contextvars import ContextVar
from datetime import date, datetime

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.coaching import contextual_greeting
from ..core.dates import parse_local_date
from ..core.insights import InsightLimitError, ensure_capacity
from ..core.models import Goal, Insight, Meal, Profile, WeighIn, Workout
from ..core.progress import classify_progress
from ..core.prompt import build_system_prompt
from ..core.reports import build_daily_log, summarize_date_range
from ..core.targets import resolve_targets
from .context_loader import (
    load_coaching_context,
    load_hero_stats,
    load_streak_state,
    local_now,
    local_today,
)
from .firestore_client import CoachStoreClient, FirestoreConfig


logger = logging.getLogger(__name__)

# Context variable to store current profile_id per request
current_profile_id: ContextVar[str | None] = ContextVar("current_profile_id", default=None)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "fuelcoach",
    instructions="""FuelCoach - Conversational nutrition and fitness coach.

Call get_system_prompt at the start of a conversation and after logging to
refresh your picture of the user's day, week, streak and patterns.
When the user mentions food, exercise or weight, log it with the matching tool.
Dates are the user's local calendar dates in YYYY-MM-DD format.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized client
_store_client: CoachStoreClient | None = None


def get_store_client() -> CoachStoreClient:
    """Get or create the store client."""
    global _store_client
    if _store_client is None:
        _store_client = CoachStoreClient(FirestoreConfig.from_env())
    return _store_client


def get_profile_id() -> str:
    """Get the profile bound to this request.

    Raises:
        RuntimeError: If no profile is bound
    """
    profile_id = current_profile_id.get()
    if profile_id is None:
        raise RuntimeError("No profile bound to this request. Ensure X-Profile-Id is provided.")
    return profile_id


def _load_profile(db: CoachStoreClient, profile_id: str) -> Profile:
    """Stored profile, or an empty one so every tool keeps working on defaults."""
    profile = db.get_profile(profile_id)
    if profile is None:
        logger.warning("No profile stored for %s, using defaults", profile_id[:8])
        return Profile(id=profile_id)
    return profile


def _resolve_date(date_str: str | None, profile: Profile) -> date:
    """Parse an explicit date, or use the profile's local today.

    Raises:
        ValueError: If date_str is not YYYY-MM-DD
    """
    if date_str:
        return parse_local_date(date_str)
    return local_today(profile)


# ==================== Profile Tools ====================


@mcp.tool()
def set_targets(
    daily_calories: int | None = None,
    daily_protein: int | None = None,
    daily_carbs: int | None = None,
    daily_fat: int | None = None,
    goal: str | None = None,
    timezone: str | None = None,
    name: str | None = None,
) -> dict:
    """Update the user's daily targets, goal, timezone or name. Only provided fields change.

    Args:
        daily_calories: Daily calorie target (e.g., 2000)
        daily_protein: Daily protein target in grams (e.g., 150)
        daily_carbs: Daily carbohydrate target in grams
        daily_fat: Daily fat target in grams
        goal: One of lose, maintain, gain
        timezone: IANA timezone, e.g. "America/Chicago"
        name: The user's name

    Returns:
        The saved profile targets
    """
    profile_id = get_profile_id()
    db = get_store_client()
    try:
        profile = db.fetch_profile(profile_id)
    except Exception as e:
        logger.error("Failed to load profile before update: %s", str(e))
        return {"error": "Could not load profile. Nothing was changed."}
    if profile is None:
        profile = Profile(id=profile_id)

    updates = {
        "daily_calories": daily_calories,
        "daily_protein": daily_protein,
        "daily_carbs": daily_carbs,
        "daily_fat": daily_fat,
        "timezone": timezone,
        "name": name,
    }
    updates = {k: v for k, v in updates.items() if v is not None}
    if goal is not None:
        try:
            updates["goal"] = Goal(goal.lower())
        except ValueError:
            return {"error": "Goal must be one of: lose, maintain, gain."}

    if not updates:
        return {"error": "No updates provided."}

    try:
        profile = profile.model_copy(update=updates)
        profile = Profile(**profile.model_dump())
    except ValueError as e:
        return {"error": f"Invalid profile values: {e}"}

    if not db.save_profile(profile):
        return {"error": "Failed to save profile. Please try again."}

    targets = resolve_targets(profile)
    return {
        "targets": targets.model_dump(),
        "goal": profile.goal.value if profile.goal else None,
        "timezone": profile.timezone,
    }


@mcp.tool()
def get_profile() -> dict:
    """Retrieve the user's profile with targets (defaults filled in where unset)."""
    profile_id = get_profile_id()
    profile = _load_profile(get_store_client(), profile_id)

    return {
        "profile": profile.model_dump(mode="json"),
        "targets": resolve_targets(profile).model_dump(),
    }


# ==================== Logging Tools ====================


@mcp.tool()
def log_meal(
    name: str,
    calories: float,
    protein: float,
    carbs: float,
    fat: float,
    date: str | None = None,
    time_of_day: str | None = None,
    tags: list[str] | None = None,
) -> dict:
    """Log a meal the user ate.

    Args:
        name: Name/description of the meal or food item
        calories: Estimated calories
        protein: Grams of protein
        carbs: Grams of carbohydrates
        fat: Grams of fat
        date: Local date in YYYY-MM-DD format. Defaults to the user's today.
        time_of_day: One of breakfast, lunch, dinner, snack
        tags: Optional tags like "high-protein", "homemade"

    Returns:
        The created meal
    """
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    try:
        meal = Meal(
            profile_id=profile_id,
            date=_resolve_date(date, profile),
            name=name,
            time_of_day=time_of_day,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            tags=tags or [],
        )
    except ValueError as e:
        return {"error": f"Invalid meal: {e}"}

    if not db.add_meal(meal):
        return {"error": "Failed to log meal. Please try again."}

    return {
        "meal": meal.model_dump(mode="json"),
        "message": f"Meal logged: {name} ({calories} kcal, P:{protein}g C:{carbs}g F:{fat}g)",
    }


@mcp.tool()
def log_workout(
    exercise: str,
    date: str | None = None,
    type: str | None = None,
    duration_minutes: float | None = None,
    rpe: int | None = None,
    sets: int | None = None,
    reps: int | None = None,
    notes: str | None = None,
    calories_burned: float | None = None,
) -> dict:
    """Log a workout or exercise session.

    Args:
        exercise: Name of the exercise or workout
        date: Local date in YYYY-MM-DD format. Defaults to the user's today.
        type: cardio or strength
        duration_minutes: Duration in minutes
        rpe: Rate of perceived exertion (1-10)
        sets: Number of sets (strength training)
        reps: Reps per set
        notes: Additional notes
        calories_burned: Estimated calories burned

    Returns:
        The created workout
    """
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    try:
        workout = Workout(
            profile_id=profile_id,
            date=_resolve_date(date, profile),
            type=type,
            exercise=exercise,
            duration_minutes=duration_minutes,
            rpe=rpe,
            sets=sets,
            reps=reps,
            notes=notes,
            calories_burned=calories_burned,
        )
    except ValueError as e:
        return {"error": f"Invalid workout: {e}"}

    if not db.add_workout(workout):
        return {"error": "Failed to log workout. Please try again."}

    burned = f" (~{calories_burned} cal burned)" if calories_burned else ""
    return {
        "workout": workout.model_dump(mode="json"),
        "message": f"Workout logged: {exercise}{burned}",
    }


@mcp.tool()
def log_weight(weight: float, date: str | None = None, body_fat: float | None = None) -> dict:
    """Log a weigh-in. A second weigh-in on the same date replaces the first.

    Args:
        weight: Weight in pounds
        date: Local date in YYYY-MM-DD format. Defaults to the user's today.
        body_fat: Body fat percentage (optional)

    Returns:
        The saved weigh-in
    """
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    try:
        weigh_in = WeighIn(
            profile_id=profile_id,
            date=_resolve_date(date, profile),
            weight=weight,
            body_fat=body_fat,
        )
    except ValueError as e:
        return {"error": f"Invalid weigh-in: {e}"}

    if not db.upsert_weigh_in(weigh_in):
        return {"error": "Failed to log weight. Please try again."}

    bf = f" ({body_fat}% body fat)" if body_fat else ""
    return {
        "weigh_in": weigh_in.model_dump(mode="json"),
        "message": f"Weight logged: {weight} lbs{bf}",
    }


@mcp.tool()
def update_meal(
    meal_id: str,
    name: str | None = None,
    calories: float | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
    time_of_day: str | None = None,
    date: str | None = None,
) -> dict:
    """Update an existing meal. Only provided fields are updated.

    Args:
        meal_id: The ID of the meal to update
        name: New name (optional)
        calories: New calorie count (optional)
        protein: New protein value (optional)
        carbs: New carbs value (optional)
        fat: New fat value (optional)
        time_of_day: New mealtime tag (optional)
        date: Move the meal to another local date, YYYY-MM-DD (optional)

    Returns:
        The updated meal
    """
    profile_id = get_profile_id()
    db = get_store_client()

    updates = {
        "name": name,
        "calories": calories,
        "protein": protein,
        "carbs": carbs,
        "fat": fat,
        "time_of_day": time_of_day,
        "date": date,
    }
    updates = {k: v for k, v in updates.items() if v is not None}

    if not updates:
        return {"error": "No updates provided."}

    meal = db.update_meal(profile_id, meal_id, updates)
    if meal is None:
        return {"error": "Meal not found or update failed."}

    return {"meal": meal.model_dump(mode="json"), "message": "Meal updated successfully"}


@mcp.tool()
def delete_meal(meal_id: str) -> dict:
    """Delete a meal entry.

    Args:
        meal_id: The ID of the meal to delete

    Returns:
        Confirmation
    """
    profile_id = get_profile_id()
    if not get_store_client().delete_meal(profile_id, meal_id):
        return {"error": "Meal not found or delete failed."}
    return {"success": True, "message": "Meal deleted successfully"}


# ==================== Query Tools ====================


@mcp.tool()
def get_daily_log(date: str | None = None) -> dict:
    """Get all meals, workouts and the weigh-in for a date, with totals.

    Args:
        date: Local date in YYYY-MM-DD format. Defaults to the user's today.

    Returns:
        Dictionary with meals, workouts, weigh_in and totals
    """
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    try:
        log_date = _resolve_date(date, profile)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    report = build_daily_log(
        log_date,
        db.list_meals(profile_id, log_date, log_date),
        db.list_workouts(profile_id, log_date, log_date),
        db.get_weigh_in(profile_id, log_date),
    )
    return report.model_dump(mode="json")


@mcp.tool()
def get_date_range_summary(start_date: str, end_date: str) -> dict:
    """Get aggregated stats for a date range (averages per tracked day, totals).

    Args:
        start_date: Start date in YYYY-MM-DD format
        end_date: End date in YYYY-MM-DD format

    Returns:
        Days tracked, average calories/protein, workout count, weight change
    """
    profile_id = get_profile_id()
    db = get_store_client()

    try:
        start = parse_local_date(start_date)
        end = parse_local_date(end_date)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}
    if start > end:
        return {"error": "start_date must not be after end_date."}

    summary = summarize_date_range(
        start,
        end,
        db.list_meals(profile_id, start, end),
        db.list_workouts(profile_id, start, end),
        db.list_weigh_ins(profile_id, start, end),
    )
    return summary.model_dump(mode="json")


@mcp.tool()
def get_weight_trend(start_date: str, end_date: str) -> list[dict]:
    """Get weigh-ins for a date range, oldest first.

    Args:
        start_date: Start date in YYYY-MM-DD format
        end_date: End date in YYYY-MM-DD format
    """
    profile_id = get_profile_id()
    try:
        start = parse_local_date(start_date)
        end = parse_local_date(end_date)
    except ValueError:
        return [{"error": "Invalid date format. Use YYYY-MM-DD."}]

    weigh_ins = get_store_client().list_weigh_ins(profile_id, start, end)
    return [w.model_dump(mode="json") for w in weigh_ins]


@mcp.tool()
def search_meals(query: str, start_date: str | None = None, end_date: str | None = None) -> list[dict]:
    """Search past meals by name.

    Args:
        query: Search term matched against meal names
        start_date: Optional start date filter (YYYY-MM-DD)
        end_date: Optional end date filter (YYYY-MM-DD)

    Returns:
        Up to 20 matching meals, most recent first
    """
    profile_id = get_profile_id()
    try:
        start = parse_local_date(start_date) if start_date else None
        end = parse_local_date(end_date) if end_date else None
    except ValueError:
        return [{"error": "Invalid date format. Use YYYY-MM-DD."}]

    meals = get_store_client().search_meals(profile_id, query, start, end)
    return [m.model_dump(mode="json") for m in meals]


# ==================== Memory Tools ====================


@mcp.tool()
def add_insight(category: str, insight: str) -> dict:
    """Remember an insight about the user for future conversations. Use sparingly.

    Args:
        category: One of pattern, preference, constraint, goal_context
        insight: The insight to remember

    Returns:
        The stored insight, or an error if the active-insight cap is reached
    """
    profile_id = get_profile_id()
    db = get_store_client()

    try:
        new_insight = Insight(profile_id=profile_id, category=category, insight=insight)
    except ValueError as e:
        return {"error": f"Invalid insight: {e}"}

    try:
        ensure_capacity(db.count_active_insights(profile_id))
    except InsightLimitError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error("Failed to count insights: %s", str(e))
        return {"error": "Could not verify insight capacity. Please try again."}

    if not db.save_insight(new_insight):
        return {"error": "Failed to add insight. Please try again."}

    return {"insight": new_insight.model_dump(mode="json"), "message": f'Insight added: "{insight}"'}


@mcp.tool()
def update_insight(insight_id: str, insight: str | None = None, active: bool | None = None) -> dict:
    """Update the text of an insight, or deactivate/reactivate it. Insights are never deleted.

    Args:
        insight_id: The ID of the insight to update
        insight: New insight text (optional)
        active: Whether the insight should be active (optional)

    Returns:
        The updated insight
    """
    profile_id = get_profile_id()
    db = get_store_client()

    current = db.get_insight(profile_id, insight_id)
    if current is None:
        return {"error": "Insight not found."}

    try:
        if active and not current.active:
            ensure_capacity(db.count_active_insights(profile_id))
    except InsightLimitError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error("Failed to count insights: %s", str(e))
        return {"error": "Could not verify insight capacity. Please try again."}

    updates: dict = {"updated_at": datetime.utcnow()}
    if insight:
        updates["insight"] = insight
    if active is not None:
        updates["active"] = active

    updated = current.model_copy(update=updates)
    if not db.save_insight(updated):
        return {"error": "Failed to update insight. Please try again."}

    return {"insight": updated.model_dump(mode="json"), "message": "Insight updated"}


# ==================== Coaching Tools ====================


@mcp.tool()
def get_coaching_context() -> dict:
    """Get the structured coaching bundle: today, yesterday, last 7 days, patterns and streak."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    context = load_coaching_context(db, profile)
    return context.model_dump(mode="json")


@mcp.tool()
def get_system_prompt() -> str:
    """Get the full coaching system prompt rendered from the user's current data."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    return build_system_prompt(load_coaching_context(db, profile))


@mcp.tool()
def get_progress_state() -> dict:
    """Classify today's live progress: victory, almost, on-track, struggling or fresh-start."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    now = local_now(profile)
    today = now.date()
    report = build_daily_log(today, db.list_meals(profile_id, today, today), [])
    targets = resolve_targets(profile)

    state = classify_progress(
        report.totals.calories,
        report.totals.protein,
        targets.calories,
        targets.protein,
        now.hour,
    )
    return {
        "state": state.value,
        "calories": report.totals.calories,
        "protein": report.totals.protein,
        "targets": targets.model_dump(),
        "hour": now.hour,
    }


@mcp.tool()
def get_streak() -> dict:
    """Get the user's current and best streak of on-target days."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    return load_streak_state(db, profile).model_dump()


@mcp.tool()
def get_hero_stats() -> dict:
    """Get dashboard numbers: streaks, days active, weight change, weekly averages."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    return load_hero_stats(db, profile).model_dump()


@mcp.tool()
def get_greeting() -> str:
    """Get a time-aware opening line for the conversation."""
    profile_id = get_profile_id()
    db = get_store_client()
    profile = _load_profile(db, profile_id)

    now = local_now(profile)
    today = now.date()
    report = build_daily_log(today, db.list_meals(profile_id, today, today), [])
    streak = load_streak_state(db, profile, today)

    return contextual_greeting(
        profile.name or "there",
        streak.current_streak,
        report.totals.calories,
        report.totals.protein,
        resolve_targets(profile),
        now.hour,
    )
