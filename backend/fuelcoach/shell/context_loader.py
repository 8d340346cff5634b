"""Context Loader - Fetch a profile's rows and hand them to the core.

Every call recomputes from storage; there is no cache to invalidate. The
local date and hour are resolved here, in the profile's timezone, and passed
into the pure core functions.
"""

import logging
import os
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.aggregation import daily_totals
from ..core.coaching import build_coaching_context
from ..core.models import CoachingContext, HeroStats, Profile, StreakState
from ..core.snapshots import WEEKLY_WINDOW_DAYS
from ..core.stats import build_hero_stats
from ..core.streaks import STREAK_LOOKBACK_DAYS, compute_streaks
from ..core.targets import resolve_goal
from .firestore_client import CoachStoreClient


logger = logging.getLogger(__name__)

# Longest history read for best-streak and dashboard stats.
HISTORY_LOOKBACK_DAYS = 365


def profile_zoneinfo(profile: Profile | None) -> ZoneInfo:
    """Timezone for a profile: its own, then DEFAULT_TIMEZONE, then UTC."""
    candidates = [
        profile.timezone if profile else None,
        os.environ.get("DEFAULT_TIMEZONE"),
    ]
    for tz_name in candidates:
        if not tz_name:
            continue
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, trying fallback", tz_name)
    return ZoneInfo("UTC")


def local_now(profile: Profile | None) -> datetime:
    """Current wall-clock time where the user is."""
    return datetime.now(profile_zoneinfo(profile))


def local_today(profile: Profile | None) -> date:
    return local_now(profile).date()


def _window_start(today: date, days: int) -> date:
    return today - timedelta(days=days - 1)


def load_coaching_context(
    db: CoachStoreClient, profile: Profile, now: datetime | None = None
) -> CoachingContext:
    """Fetch everything the coaching context needs and build it.

    Fetch failures surface from the store as empty results, so the context
    degrades to zeros rather than failing.

    Args:
        db: Store client
        profile: The profile being coached
        now: Local time override (defaults to the profile's wall clock)

    Returns:
        CoachingContext
    """
    now = now or local_now(profile)
    today = now.date()

    meals = db.list_meals(profile.id, _window_start(today, STREAK_LOOKBACK_DAYS), today)
    workouts = db.list_workouts(profile.id, _window_start(today, WEEKLY_WINDOW_DAYS), today)
    insights = db.list_active_insights(profile.id)
    latest_weigh_in = db.latest_weigh_in(profile.id, today)
    latest_workout = db.latest_workout(profile.id, today)

    logger.debug(
        "Building context for %s: %d meals, %d workouts, %d insights",
        profile.id[:8], len(meals), len(workouts), len(insights),
    )

    return build_coaching_context(
        profile,
        meals,
        workouts,
        today,
        now.hour,
        insights=insights,
        latest_weigh_in=latest_weigh_in,
        latest_workout=latest_workout,
    )


def _history_start(profile: Profile, today: date) -> date:
    earliest = today - timedelta(days=HISTORY_LOOKBACK_DAYS - 1)
    if profile.start_date and profile.start_date > earliest:
        return profile.start_date
    return earliest


def load_streak_state(db: CoachStoreClient, profile: Profile, today: date | None = None) -> StreakState:
    """Recompute current and best streak from stored meals.

    Never raises: any failure yields a zero streak.
    """
    today = today or local_today(profile)
    try:
        meals = db.list_meals(profile.id, _history_start(profile, today), today)
        return compute_streaks(
            daily_totals(meals),
            today,
            profile.daily_calories,
            profile.daily_protein,
            resolve_goal(profile),
        )
    except Exception as e:
        logger.error("Failed to compute streak: %s", str(e))
        return StreakState()


def load_hero_stats(db: CoachStoreClient, profile: Profile, today: date | None = None) -> HeroStats:
    """Dashboard headline numbers from stored history."""
    today = today or local_today(profile)
    meals = db.list_meals(profile.id, _history_start(profile, today), today)
    latest = db.latest_weigh_in(profile.id, today)
    return build_hero_stats(profile, meals, latest, today)
