"""Insight Memory - Bounds on what the model may remember about a user.

Insights are only ever deactivated, never deleted, and at most
MAX_ACTIVE_INSIGHTS may be active for a profile at once.
"""

MAX_ACTIVE_INSIGHTS = 20


class InsightLimitError(Exception):
    """Raised when a write would push active insights past the cap."""

    def __init__(self, active_count: int) -> None:
        self.active_count = active_count
        super().__init__(
            f"Maximum of {MAX_ACTIVE_INSIGHTS} active insights reached "
            f"({active_count} active). Deactivate an existing insight first."
        )


def ensure_capacity(active_count: int) -> None:
    """Check there is room for one more active insight.

    Args:
        active_count: Current number of active insights for the profile

    Raises:
        InsightLimitError: If the profile is already at the cap
    """
    if active_count >= MAX_ACTIVE_INSIGHTS:
        raise InsightLimitError(active_count)

