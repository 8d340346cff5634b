"""Temporal Aggregation - Pure functions that bucket logged rows by date.

All functions are pure: same input always produces same output, no side effects.
Input order never matters.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Sequence, TypeVar

from .models import DayTotals, Meal


MACRO_FIELDS = ("calories", "protein", "carbs", "fat")
WORKOUT_FIELDS = ("duration_minutes", "calories_burned")

T = TypeVar("T")


def sum_fields(entries: Iterable[Any], fields: Sequence[str]) -> dict[str, float]:
    """Sum numeric attributes across entries.

    Missing attributes and None values count as 0.

    Args:
        entries: Rows with numeric attributes
        fields: Attribute names to sum

    Returns:
        Mapping of field name to total
    """
    totals = {field: 0.0 for field in fields}
    for entry in entries:
        for field in fields:
            totals[field] += getattr(entry, field, None) or 0
    return totals


def group_by_date(entries: Iterable[T]) -> dict[date, list[T]]:
    """Bucket rows by their `date` attribute, preserving input order per bucket."""
    grouped: dict[date, list[T]] = defaultdict(list)
    for entry in entries:
        grouped[entry.date].append(entry)
    return dict(grouped)


def aggregate_by_date(
    entries: Iterable[Any], fields: Sequence[str] = MACRO_FIELDS
) -> dict[date, dict[str, float]]:
    """Sum numeric fields per distinct date.

    Dates with no entries do not appear; callers supply their own zero default.

    Args:
        entries: Rows with a `date` attribute
        fields: Attribute names to sum

    Returns:
        Mapping of date to field totals
    """
    return {
        day: sum_fields(rows, fields)
        for day, rows in group_by_date(entries).items()
    }


def sum_meals(meals: Iterable[Meal]) -> DayTotals:
    """Total macros for a set of meals."""
    return DayTotals(**sum_fields(meals, MACRO_FIELDS))


def daily_totals(meals: Iterable[Meal]) -> dict[date, DayTotals]:
    """Per-date macro totals for every date that has at least one meal."""
    return {
        day: DayTotals(**totals)
        for day, totals in aggregate_by_date(meals, MACRO_FIELDS).items()
    }
