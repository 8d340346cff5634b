"""Unit tests for system prompt rendering."""

from datetime import date, timedelta

from fuelcoach.core.coaching import build_coaching_context
from fuelcoach.core.models import Insight, Meal, MealTime, Profile, WeighIn, Workout
from fuelcoach.core.prompt import GUIDELINES, NUTRITION_REFERENCE, build_system_prompt


TODAY = date(2024, 12, 28)


def render(profile=None, meals=(), workouts=(), hour=9, **kwargs):
    context = build_coaching_context(profile or Profile(id="p1"), list(meals), list(workouts), TODAY, hour, **kwargs)
    return build_system_prompt(context)


class TestBuildSystemPrompt:
    """Tests for build_system_prompt."""

    def test_new_user(self):
        """An empty history still renders every fixed section."""
        prompt = render()

        assert "helping there achieve their health goals" in prompt
        assert "Saturday, December 28, 2024" in prompt
        assert "- Calories: 2000 kcal" in prompt
        assert "No meals logged today yet." in prompt
        assert "No data from the past week." in prompt
        assert "Progress state: fresh-start." in prompt
        assert GUIDELINES in prompt
        assert NUTRITION_REFERENCE in prompt

    def test_profile_details(self):
        """Profile fields and notes are shown."""
        profile = Profile(
            id="p1",
            name="Sam",
            height_inches=70,
            daily_calories=1800,
            goal="lose",
            coaching_notes="Vegetarian",
        )
        prompt = render(profile)

        assert "- Name: Sam" in prompt
        assert "- Goal: lose weight" in prompt
        assert "- Height: 5'10\"" in prompt
        assert "- Calories: 1800 kcal" in prompt
        assert "## Coaching Notes (from user)\nVegetarian" in prompt

    def test_today_meals_include_ids(self):
        """Meal lines carry IDs so the model can edit them."""
        oats = Meal(profile_id="p1", date=TODAY, name="Oats", calories=350, protein=12, time_of_day=MealTime.BREAKFAST)
        prompt = render(meals=[oats])

        assert f"- Oats (breakfast): 350 kcal, P:12g C:0g F:0g [ID: {oats.id}]" in prompt
        assert "Calories: 350/2000 kcal (18%)" in prompt

    def test_workout_credit_line(self):
        """Burned calories show up as a budget credit."""
        run = Workout(profile_id="p1", date=TODAY, exercise="Run", duration_minutes=30, calories_burned=300)
        prompt = render(workouts=[run])

        assert "- Run: 30 min, ~300 cal burned" in prompt
        assert "Workout credit: +150 kcal" in prompt

    def test_week_and_patterns(self):
        """A week of history renders the rollup and patterns."""
        meals = [
            Meal(profile_id="p1", date=TODAY - timedelta(days=i), name="Breakfast eggs", calories=2000, protein=150)
            for i in range(1, 6)
        ]
        prompt = render(meals=meals)

        assert "## Last 7 Days" in prompt
        assert "- Days tracked: 5" in prompt
        assert "## Patterns Noticed" in prompt
        assert "5/5 days on target. Consistency is dialed in." in prompt

    def test_insights_and_weigh_in(self):
        """Remembered insights and the latest weigh-in are included."""
        insight = Insight(profile_id="p1", category="constraint", insight="Lactose intolerant")
        weigh_in = WeighIn(profile_id="p1", date=TODAY, weight=182.4)
        prompt = render(insights=[insight], latest_weigh_in=weigh_in)

        assert f"- [constraint] Lactose intolerant [ID: {insight.id}]" in prompt
        assert "### Latest Weigh-in (2024-12-28): 182.4 lbs" in prompt

    def test_quick_wins_in_the_evening(self):
        """Struggling evenings get snack suggestions."""
        snack = Meal(profile_id="p1", date=TODAY, name="Toast", calories=300, protein=10)
        prompt = render(meals=[snack], hour=19)

        assert "Progress state: struggling." in prompt
        assert "- Quick wins: Greek yogurt (15g)" in prompt
