"""Progress State - Classify today's live totals into a coaching tone.

Stateless; re-run on every totals change. Uses plain percentage thresholds,
independent of the streak and weekly tolerance bands.
"""

from datetime import date

from .models import ProgressState


PRO_TIPS = (
    "Prep breakfast tonight to start strong tomorrow",
    "High-protein breakfast = easier target by dinner",
    "You're building a habit. One day at a time.",
    "Rest well - recovery is part of the process",
    "Consistency beats perfection. You showed up today.",
    "Tomorrow's a new opportunity to crush it",
)

PROTEIN_SUGGESTIONS = (
    ("Greek yogurt", "15g"),
    ("Protein shake", "25g"),
    ("3 eggs", "18g"),
    ("Cheese stick + almonds", "12g"),
    ("Cottage cheese cup", "14g"),
)

CALORIE_SUGGESTIONS = (
    ("Handful of nuts", "180 cal"),
    ("Avocado toast", "250 cal"),
    ("Banana with peanut butter", "200 cal"),
)


def _ratio(value: float, target: float) -> float:
    # A non-positive target has nothing left to reach.
    if target <= 0:
        return 1.0
    return value / target


def classify_progress(
    calories: float,
    protein: float,
    target_calories: float,
    target_protein: float,
    hour: int,
) -> ProgressState:
    """Map today's totals and the local hour to a progress state.

    First match wins:
        victory      both >= 100%
        almost       both >= 80%, or one >= 100% and the other >= 70%
        fresh-start  before noon and calories < 20%
        struggling   6pm or later and either < 40%
        on-track     anything else

    Args:
        calories: Calories eaten so far today
        protein: Protein eaten so far today, grams
        target_calories: Daily calorie target
        target_protein: Daily protein target
        hour: Current local hour, 0-23

    Returns:
        The ProgressState
    """
    cal_pct = _ratio(calories, target_calories)
    pro_pct = _ratio(protein, target_protein)

    if cal_pct >= 1 and pro_pct >= 1:
        return ProgressState.VICTORY

    if (
        (cal_pct >= 0.8 and pro_pct >= 0.8)
        or (cal_pct >= 1 and pro_pct >= 0.7)
        or (pro_pct >= 1 and cal_pct >= 0.7)
    ):
        return ProgressState.ALMOST

    if hour < 12 and cal_pct < 0.2:
        return ProgressState.FRESH_START

    if hour >= 18 and (cal_pct < 0.4 or pro_pct < 0.4):
        return ProgressState.STRUGGLING

    return ProgressState.ON_TRACK


def tip_of_the_day(day: date) -> str:
    """Rotate through PRO_TIPS by day of month so the tip is stable all day."""
    return PRO_TIPS[day.day % len(PRO_TIPS)]


def quick_wins(state: ProgressState, protein_short: bool) -> list[str]:
    """Snack ideas for states where a small top-up changes the outcome."""
    if state not in (ProgressState.ALMOST, ProgressState.STRUGGLING):
        return []
    suggestions = PROTEIN_SUGGESTIONS if protein_short else CALORIE_SUGGESTIONS
    return [f"{food} ({amount})" for food, amount in suggestions]
