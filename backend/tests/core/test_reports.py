"""Unit tests for report generation - pure functions, no mocks needed."""

from datetime import date

from fuelcoach.core.models import Meal, WeighIn, Workout
from fuelcoach.core.reports import (
    build_daily_log,
    calculate_weight_change,
    summarize_date_range,
)


def meal(day, calories, protein, carbs=0, fat=0, name="Food"):
    return Meal(profile_id="p1", date=day, name=name, calories=calories, protein=protein, carbs=carbs, fat=fat)


def weigh_in(day, weight):
    return WeighIn(profile_id="p1", date=day, weight=weight)


class TestBuildDailyLog:
    """Tests for build_daily_log."""

    def test_empty_log(self):
        """Empty day returns zero totals."""
        report = build_daily_log(date(2024, 12, 28), [], [])

        assert report.date == date(2024, 12, 28)
        assert report.totals.calories == 0
        assert report.meals == []
        assert report.weigh_in is None

    def test_log_with_entries(self):
        """Meals on the day are totalled; other days are ignored."""
        day = date(2024, 12, 28)
        meals = [
            meal(day, 100, 10, carbs=10, fat=5, name="A"),
            meal(day, 200, 20, carbs=20, fat=10, name="B"),
            meal(date(2024, 12, 27), 900, 90, name="Yesterday"),
        ]
        workouts = [Workout(profile_id="p1", date=day, exercise="Run")]
        report = build_daily_log(day, meals, workouts, weigh_in(day, 180))

        assert [m.name for m in report.meals] == ["A", "B"]
        assert report.totals.calories == 300
        assert report.totals.protein == 30
        assert report.totals.carbs == 30
        assert report.totals.fat == 15
        assert len(report.workouts) == 1
        assert report.weigh_in.weight == 180


class TestCalculateWeightChange:
    """Tests for calculate_weight_change."""

    def test_loss_is_negative(self):
        """Weight lost comes out negative."""
        change = calculate_weight_change([weigh_in(date(2024, 12, 22), 185.0), weigh_in(date(2024, 12, 28), 183.2)])
        assert change == -1.8

    def test_ordered_by_date(self):
        """Input order does not matter."""
        change = calculate_weight_change([weigh_in(date(2024, 12, 28), 186.0), weigh_in(date(2024, 12, 22), 185.0)])
        assert change == 1.0

    def test_single_weigh_in(self):
        """One weigh-in is not a change."""
        assert calculate_weight_change([weigh_in(date(2024, 12, 28), 185.0)]) is None


class TestSummarizeDateRange:
    """Tests for summarize_date_range."""

    def test_empty_range(self):
        """Nothing logged gives zeros and no weight change."""
        summary = summarize_date_range(date(2024, 12, 22), date(2024, 12, 28), [], [], [])

        assert summary.days_tracked == 0
        assert summary.avg_daily_calories == 0
        assert summary.workout_count == 0
        assert summary.weight_change is None

    def test_averages_per_tracked_day(self):
        """Averages divide by days with meals, not calendar days."""
        meals = [
            meal(date(2024, 12, 25), 1500, 100),
            meal(date(2024, 12, 25), 500, 20),
            meal(date(2024, 12, 26), 2200, 120),
        ]
        summary = summarize_date_range(date(2024, 12, 22), date(2024, 12, 28), meals, [], [])

        assert summary.days_tracked == 2
        assert summary.avg_daily_calories == 2100
        assert summary.avg_daily_protein == 120

    def test_rows_outside_range_excluded(self):
        """Rows before or after the range are ignored."""
        meals = [
            meal(date(2024, 12, 20), 5000, 100, name="Old"),
            meal(date(2024, 12, 25), 2000, 100, name="Current"),
            meal(date(2024, 12, 29), 5000, 100, name="Future"),
        ]
        workouts = [
            Workout(profile_id="p1", date=date(2024, 12, 21), exercise="Run"),
            Workout(profile_id="p1", date=date(2024, 12, 22), exercise="Lift"),
        ]
        weigh_ins = [
            weigh_in(date(2024, 12, 1), 200.0),
            weigh_in(date(2024, 12, 22), 185.0),
            weigh_in(date(2024, 12, 28), 184.0),
        ]
        summary = summarize_date_range(date(2024, 12, 22), date(2024, 12, 28), meals, workouts, weigh_ins)

        assert summary.days_tracked == 1
        assert summary.avg_daily_calories == 2000
        assert summary.workout_count == 1
        assert summary.weight_change == -1.0
