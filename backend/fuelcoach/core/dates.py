"""Calendar Helpers - Pure functions over local calendar dates.

The caller supplies "today" and the current hour already resolved in the
user's timezone. Nothing here reads the clock.
"""

from datetime import date, timedelta
from typing import Literal


TimeOfDay = Literal["morning", "afternoon", "evening", "night"]


def last_n_days(today: date, n: int) -> list[date]:
    """List today and the n-1 previous days, most recent first.

    Args:
        today: The local calendar day to count back from
        n: Number of days including today

    Returns:
        Dates in descending order (empty if n <= 0)
    """
    return [today - timedelta(days=i) for i in range(max(n, 0))]


def parse_local_date(value: str) -> date:
    """Parse a YYYY-MM-DD string as a calendar date, with no timezone shift.

    Raises:
        ValueError: If the string is not an ISO date
    """
    return date.fromisoformat(value)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def time_of_day(hour: int) -> TimeOfDay:
    """Bucket a local hour (0-23) for the coaching prompt."""
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    if hour < 21:
        return "evening"
    return "night"


def meals_remaining(hour: int) -> int:
    """Rough number of main meals still ahead today."""
    if hour < 10:
        return 3
    if hour < 14:
        return 2
    if hour < 20:
        return 1
    return 0


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    return (end - start).days
