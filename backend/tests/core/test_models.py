"""Unit tests for data models - validation and defaults."""

import pytest
from datetime import date
from pydantic import ValidationError

from fuelcoach.core.models import (
    DailySnapshot,
    Goal,
    Insight,
    InsightCategory,
    Meal,
    MealTime,
    Profile,
    WeighIn,
    Workout,
)


class TestProfile:
    """Tests for Profile model."""

    def test_targets_default_to_none(self):
        """Unset targets stay None; defaults are applied by the evaluator."""
        profile = Profile(name="Sam")
        assert profile.daily_calories is None
        assert profile.daily_protein is None
        assert profile.goal is None
        assert profile.id is not None

    def test_goal_parsed_from_string(self):
        """Goal accepts its string value."""
        profile = Profile(goal="lose")
        assert profile.goal == Goal.LOSE

    def test_unknown_goal_rejected(self):
        """Only lose/maintain/gain are valid goals."""
        with pytest.raises(ValidationError):
            Profile(goal="bulk")

    def test_negative_target_rejected(self):
        """Negative targets are rejected."""
        with pytest.raises(ValidationError):
            Profile(daily_calories=-100)


class TestMeal:
    """Tests for Meal model."""

    def test_date_parsed_from_iso_string(self):
        """Stored YYYY-MM-DD strings become calendar dates."""
        meal = Meal(profile_id="p1", date="2024-12-28", name="Oats")
        assert meal.date == date(2024, 12, 28)

    def test_macros_nullable(self):
        """Macros may be missing; aggregation treats them as zero."""
        meal = Meal(profile_id="p1", date=date(2024, 12, 28), name="Mystery snack")
        assert meal.calories is None
        assert meal.tags == []

    def test_time_of_day_enum(self):
        """Mealtime tag accepts its string value."""
        meal = Meal(profile_id="p1", date=date(2024, 12, 28), name="Eggs", time_of_day="breakfast")
        assert meal.time_of_day == MealTime.BREAKFAST

    def test_empty_name_rejected(self):
        """Empty name is rejected."""
        with pytest.raises(ValidationError):
            Meal(profile_id="p1", date=date(2024, 12, 28), name="")

    def test_negative_macros_rejected(self):
        """Negative macros are rejected."""
        with pytest.raises(ValidationError):
            Meal(profile_id="p1", date=date(2024, 12, 28), name="Food", protein=-5)


class TestWorkoutAndWeighIn:
    """Tests for Workout and WeighIn models."""

    def test_rpe_bounds(self):
        """RPE must be between 1 and 10."""
        with pytest.raises(ValidationError):
            Workout(profile_id="p1", date=date(2024, 12, 28), exercise="Run", rpe=11)

    def test_weight_must_be_positive(self):
        """Zero weight is rejected."""
        with pytest.raises(ValidationError):
            WeighIn(profile_id="p1", date=date(2024, 12, 28), weight=0)


class TestInsight:
    """Tests for Insight model."""

    def test_active_by_default(self):
        """New insights are active."""
        insight = Insight(profile_id="p1", category="preference", insight="Hates cilantro")
        assert insight.active is True
        assert insight.category == InsightCategory.PREFERENCE

    def test_unknown_category_rejected(self):
        """Category must be one of the four known values."""
        with pytest.raises(ValidationError):
            Insight(profile_id="p1", category="gossip", insight="Something")


class TestDailySnapshot:
    """Tests for DailySnapshot defaults."""

    def test_defaults_are_zero_and_false(self):
        """A bare snapshot has zero totals and no hits."""
        snapshot = DailySnapshot(date=date(2024, 12, 28), target_calories=2000, target_protein=150)
        assert snapshot.calories == 0
        assert snapshot.hit_both_targets is False
        assert snapshot.meals == []
