"""Unit tests for progress state classification - pure functions, no mocks needed."""

from datetime import date

from fuelcoach.core.models import ProgressState
from fuelcoach.core.progress import (
    PRO_TIPS,
    classify_progress,
    quick_wins,
    tip_of_the_day,
)


class TestClassifyProgress:
    """Tests for classify_progress."""

    def test_victory(self):
        """Both at 100% is victory at any hour."""
        assert classify_progress(2000, 150, 2000, 150, 9) == ProgressState.VICTORY

    def test_almost_both_at_80_percent(self):
        """1700/2000 and 125/150 (both >= 80%) is almost."""
        assert classify_progress(1700, 125, 2000, 150, 14) == ProgressState.ALMOST

    def test_almost_one_full_other_70_percent(self):
        """One target met and the other at 70% is almost."""
        assert classify_progress(2000, 105, 2000, 150, 14) == ProgressState.ALMOST
        assert classify_progress(1400, 150, 2000, 150, 14) == ProgressState.ALMOST

    def test_almost_just_short_of_victory(self):
        """99% of calories with protein fully met is almost, not victory."""
        assert classify_progress(1980, 150, 2000, 150, 14) == ProgressState.ALMOST

    def test_fresh_start_in_the_morning(self):
        """Before noon with calories under 20% is a fresh start."""
        assert classify_progress(300, 20, 2000, 150, 9) == ProgressState.FRESH_START

    def test_noon_is_not_morning(self):
        """At 12:00 the fresh-start window has closed."""
        assert classify_progress(300, 20, 2000, 150, 12) == ProgressState.ON_TRACK

    def test_struggling_in_the_evening(self):
        """800/2000 (40%) but 50/150 protein (33%) at 7pm is struggling."""
        assert classify_progress(800, 50, 2000, 150, 19) == ProgressState.STRUGGLING

    def test_evening_at_exactly_40_percent(self):
        """40% exactly is not under 40%."""
        assert classify_progress(800, 60, 2000, 150, 19) == ProgressState.ON_TRACK

    def test_on_track_default(self):
        """Midday partial progress is on-track."""
        assert classify_progress(1000, 70, 2000, 150, 14) == ProgressState.ON_TRACK

    def test_almost_wins_over_struggling(self):
        """First match wins, so almost beats the evening check."""
        assert classify_progress(1700, 125, 2000, 150, 21) == ProgressState.ALMOST

    def test_zero_target_counts_as_met(self):
        """A zero target never blocks victory."""
        assert classify_progress(2000, 0, 2000, 0, 14) == ProgressState.VICTORY


class TestTipOfTheDay:
    """Tests for tip_of_the_day."""

    def test_stable_within_day(self):
        """The tip depends only on the day of month."""
        assert tip_of_the_day(date(2024, 12, 1)) == tip_of_the_day(date(2025, 3, 1))
        assert tip_of_the_day(date(2024, 12, 1)) == PRO_TIPS[1]


class TestQuickWins:
    """Tests for quick_wins."""

    def test_protein_suggestions_when_short(self):
        """Short on protein gives protein snacks."""
        wins = quick_wins(ProgressState.ALMOST, protein_short=True)
        assert "Protein shake (25g)" in wins

    def test_calorie_suggestions_otherwise(self):
        """Otherwise calorie-dense snacks."""
        wins = quick_wins(ProgressState.STRUGGLING, protein_short=False)
        assert "Handful of nuts (180 cal)" in wins

    def test_none_for_other_states(self):
        """Victory and on-track need no top-up."""
        assert quick_wins(ProgressState.VICTORY, protein_short=True) == []
        assert quick_wins(ProgressState.ON_TRACK, protein_short=True) == []
