"""Unit tests for coaching context assembly - pure functions, no mocks needed."""

from datetime import date, timedelta

from fuelcoach.core.coaching import (
    NO_WORKOUT_SENTINEL,
    build_coaching_context,
    build_today_status,
    contextual_greeting,
    days_since_last_workout,
    generate_coaching_tips,
)
from fuelcoach.core.models import (
    DailySnapshot,
    Goal,
    Insight,
    Meal,
    MealTime,
    Profile,
    ProgressState,
    Targets,
    Workout,
)
from fuelcoach.core.snapshots import build_daily_snapshot


TARGETS = Targets(calories=2000, protein=150, carbs=200, fat=65)
TODAY = date(2024, 12, 28)


def meal(day, calories, protein, name="Food", time_of_day=None):
    return Meal(profile_id="p1", date=day, name=name, calories=calories, protein=protein, time_of_day=time_of_day)


def workout(day, exercise="Run", calories_burned=None, notes=None):
    return Workout(profile_id="p1", date=day, exercise=exercise, calories_burned=calories_burned, notes=notes)


def empty_yesterday():
    return DailySnapshot(date=TODAY - timedelta(days=1), target_calories=2000, target_protein=150)


class TestBuildTodayStatus:
    """Tests for build_today_status."""

    def test_workout_credit_is_half_burned(self):
        """300 kcal burned adds 150 back to the budget."""
        snapshot = build_daily_snapshot(
            TODAY, [meal(TODAY, 500, 40)], [workout(TODAY, calories_burned=300)], TARGETS
        )
        status = build_today_status(snapshot, 13, TARGETS)

        assert status.workout_credit == 150
        assert status.remaining_calories == 2000 + 150 - 500
        assert status.remaining_protein == 110
        assert status.time_of_day == "afternoon"
        assert status.meals_remaining == 2

    def test_meals_logged_by_tag_or_name(self):
        """Mealtimes are detected by tag or by name."""
        snapshot = build_daily_snapshot(
            TODAY,
            [
                meal(TODAY, 400, 30, name="Oats", time_of_day=MealTime.BREAKFAST),
                meal(TODAY, 200, 10, name="Afternoon snack"),
                meal(TODAY, 150, 5, name="Apple", time_of_day=MealTime.SNACK),
            ],
            [],
            TARGETS,
        )
        logged = build_today_status(snapshot, 16, TARGETS).meals_logged

        assert logged.breakfast is True
        assert logged.lunch is False
        assert logged.snacks == 2


class TestDaysSinceLastWorkout:
    """Tests for days_since_last_workout."""

    def test_no_workouts(self):
        """No workouts gives the sentinel."""
        assert days_since_last_workout([], TODAY) == (NO_WORKOUT_SENTINEL, None)

    def test_most_recent(self):
        """The latest workout on or before today is used."""
        latest = workout(TODAY - timedelta(days=2))
        days, found = days_since_last_workout([workout(TODAY - timedelta(days=5)), latest], TODAY)
        assert days == 2
        assert found is latest


class TestGenerateCoachingTips:
    """Tests for generate_coaching_tips."""

    def test_fallback_tip(self):
        """With nothing to say, a default tip is given."""
        tips = generate_coaching_tips(empty_yesterday(), NO_WORKOUT_SENTINEL, None, 0, 0)
        assert tips == ["Focus on hitting your protein early. It's easier than catching up at dinner."]

    def test_over_yesterday(self):
        """Over by more than 200 kcal yesterday is mentioned."""
        yesterday = build_daily_snapshot(TODAY - timedelta(days=1), [meal(TODAY, 2400, 150)], [], TARGETS)
        tips = generate_coaching_tips(yesterday, NO_WORKOUT_SENTINEL, None, 0, 0)
        assert tips[0].startswith("You were 400 cal over yesterday.")

    def test_training_gap(self):
        """Three or more days without training is mentioned."""
        tips = generate_coaching_tips(empty_yesterday(), 4, workout(TODAY - timedelta(days=4)), 0, 0)
        assert tips[0].startswith("You haven't trained in 4 days.")

    def test_body_split_suggestion(self):
        """Upper body yesterday suggests lower body today."""
        last = workout(TODAY - timedelta(days=1), exercise="Upper body push")
        tips = generate_coaching_tips(empty_yesterday(), 1, last, 0, 0)
        assert tips == ["Lower body day? You did upper yesterday."]

    def test_capped_at_three(self):
        """No more than three tips."""
        yesterday = build_daily_snapshot(TODAY - timedelta(days=1), [meal(TODAY, 1000, 50)], [], TARGETS)
        tips = generate_coaching_tips(yesterday, 5, workout(TODAY - timedelta(days=5)), 40, 6)
        assert len(tips) == 3


class TestBuildCoachingContext:
    """Tests for build_coaching_context."""

    def test_empty_history(self):
        """A new user gets defaults, zero streak and no patterns."""
        context = build_coaching_context(Profile(id="p1"), [], [], TODAY, 9)

        assert context.name == "there"
        assert context.goal == Goal.MAINTAIN
        assert context.targets.calories == 2000
        assert context.streak == 0
        assert context.last_week.days == []
        assert context.progress_state == ProgressState.FRESH_START

    def test_streak_uses_goal_aware_scheme(self):
        """A cutting user under target keeps their streak."""
        profile = Profile(id="p1", name="Sam", daily_calories=2000, daily_protein=150, goal=Goal.LOSE)
        meals = [meal(TODAY - timedelta(days=i), 1500, 150) for i in range(1, 4)]
        context = build_coaching_context(profile, meals, [], TODAY, 9)

        assert context.streak == 3
        assert context.name == "Sam"
        # The weekly view is goal-agnostic, so none of these hit the band.
        assert context.last_week.consistency.days_hit_calories == 0

    def test_null_targets_mean_no_streak(self):
        """Unset targets give a zero streak even though defaults drive the weekly view."""
        meals = [meal(TODAY - timedelta(days=i), 2000, 150) for i in range(1, 4)]
        context = build_coaching_context(Profile(id="p1"), meals, [], TODAY, 9)

        assert context.streak == 0
        assert context.last_week.consistency.days_hit_both == 3

    def test_only_active_insights(self):
        """Inactive insights are left out."""
        insights = [
            Insight(profile_id="p1", category="preference", insight="Likes eggs"),
            Insight(profile_id="p1", category="preference", insight="Old note", active=False),
        ]
        context = build_coaching_context(Profile(id="p1"), [], [], TODAY, 9, insights=insights)
        assert [i.insight for i in context.insights] == ["Likes eggs"]

    def test_training_gap_beyond_weekly_window(self):
        """A workout older than the weekly window still drives the training-gap tip."""
        older = workout(TODAY - timedelta(days=10))
        context = build_coaching_context(Profile(id="p1"), [], [], TODAY, 9, latest_workout=older)
        assert context.coaching_tips[0].startswith("You haven't trained in 10 days.")

    def test_weekly_workout_beats_older_latest(self):
        recent = workout(TODAY - timedelta(days=1), exercise="Upper body push")
        context = build_coaching_context(
            Profile(id="p1"), [], [recent], TODAY, 9, latest_workout=workout(TODAY - timedelta(days=10))
        )
        assert context.coaching_tips == ["Lower body day? You did upper yesterday."]


class TestContextualGreeting:
    """Tests for contextual_greeting."""

    def test_targets_hit_with_streak(self):
        greeting = contextual_greeting("Sam", 4, 2000, 150, TARGETS, 20)
        assert greeting.startswith("4 days in a row, Sam!")

    def test_morning_with_streak(self):
        greeting = contextual_greeting("Sam", 2, 0, 0, TARGETS, 8)
        assert greeting == "Good morning Sam! You're on a 2-day streak. What's for breakfast?"

    def test_evening_close_on_protein(self):
        greeting = contextual_greeting("Sam", 0, 1500, 120, TARGETS, 19)
        assert greeting.startswith("Almost there Sam! Just 30g protein away")

    def test_late_night_nothing_logged(self):
        greeting = contextual_greeting("Sam", 0, 0, 0, TARGETS, 23)
        assert greeting == "Hey Sam! Logging yesterday's meals, or a late night snack?"
