"""Tests for the rating ledger over both store backends."""

import math
from datetime import UTC, datetime, timedelta

import pytest

from quiz_rating.core.errors import ValidationError
from quiz_rating.ranking.ledger import RatingLedger
from quiz_rating.ranking.types import ModifierBreakdown, RatingDelta, Result, TrendDirection
from quiz_rating.services.storage import (
    DBRatingStore,
    HistoryRecord,
    InMemoryRatingStore,
    create_db_engine,
)


def _delta(change: int, result: Result) -> RatingDelta:
    breakdown = ModifierBreakdown(0, 1.0, 1.0, 1.0, 1.0)
    return RatingDelta(elo_change=change, result=result, breakdown=breakdown, raw_change=change)


@pytest.fixture(params=["memory", "sqlite"])
def ledger(request):
    """Ledger over an in-memory store and over an in-memory SQLite database."""
    if request.param == "memory":
        store = InMemoryRatingStore()
    else:
        store = DBRatingStore(create_db_engine("sqlite://"))
    return RatingLedger(store)


class TestRatingLedger:
    """Tests for category seeding, updates and aggregates."""

    def test_unseen_category_seeded(self, ledger):
        """Test reading a new category seeds it at 1200."""
        assert ledger.store.has_category("astrology") is False
        assert ledger.get_rating("astrology") == 1200
        assert ledger.store.has_category("astrology") is True

    def test_empty_snapshot(self, ledger):
        """Test the overall rating defaults to the seed with no categories."""
        snapshot = ledger.snapshot()
        assert snapshot.by_category == {}
        assert snapshot.overall == 1200

    def test_apply_updates_rating(self, ledger):
        """Test applying a change writes previous + change."""
        result = ledger.apply("Tech", _delta(60, Result.WIN), difficulty="medium")

        assert result.category == "tech"
        assert result.previous_rating == 1200
        assert result.new_rating == 1260
        assert result.rank.name == "Bronze III"
        assert ledger.get_rating("tech") == 1260

    def test_apply_is_unclamped(self, ledger):
        """Test ratings can go below zero."""
        ledger.store.set_category_rating("tech", 10)
        result = ledger.apply("tech", _delta(-30, Result.LOSS))
        assert result.new_rating == -20

    def test_overall_is_mean(self, ledger):
        """Test the overall rating averages every seeded category."""
        ledger.get_rating("finance")
        result = ledger.apply("tech", _delta(60, Result.WIN))

        assert result.by_category == {"finance": 1200, "tech": 1260}
        assert result.overall == pytest.approx(1230)

    def test_categories_independent(self, ledger):
        """Test a write only touches its own category."""
        ledger.get_rating("finance")
        ledger.apply("tech", _delta(-10, Result.LOSS))
        assert ledger.get_rating("finance") == 1200

    def test_custom_initial_rating(self):
        """Test the seed rating is configurable."""
        ledger = RatingLedger(InMemoryRatingStore(), initial_rating=1500)
        assert ledger.get_rating("tech") == 1500

    def test_blank_category_rejected(self, ledger):
        """Test empty category keys are rejected."""
        with pytest.raises(ValidationError):
            ledger.apply("  ", _delta(10, Result.WIN))

    def test_history_and_stats(self, ledger):
        """Test every applied change is recorded."""
        ledger.apply("tech", _delta(60, Result.WIN), difficulty="hard", performance_score=100)
        ledger.apply("tech", _delta(0, Result.DRAW))
        ledger.apply("tech", _delta(-10, Result.LOSS))

        history = ledger.store.history("tech")
        assert [r.change for r in history] == [-10, 0, 60]
        assert history[-1].difficulty == "hard"
        assert history[-1].performance_score == 100

        stats = ledger.stats("tech")
        assert (stats.sessions, stats.wins, stats.draws, stats.losses) == (3, 1, 1, 1)
        assert stats.peak_rating == 1260
        assert stats.win_rate == 50

    def test_streaks(self, ledger):
        """Test streaks follow the most recent results."""
        assert ledger.streaks() == (0, 0)

        ledger.apply("tech", _delta(30, Result.WIN))
        ledger.apply("finance", _delta(30, Result.WIN))
        assert ledger.streaks() == (2, 0)

        ledger.apply("tech", _delta(-5, Result.LOSS))
        assert ledger.streaks() == (0, 1)

        ledger.apply("tech", _delta(0, Result.DRAW))
        assert ledger.streaks() == (0, 0)

    def test_reset(self, ledger):
        """Test reset returns every category to unseeded."""
        ledger.apply("tech", _delta(60, Result.WIN))
        ledger.reset()

        assert ledger.snapshot().by_category == {}
        assert ledger.store.history() == []
        assert ledger.get_rating("tech") == 1200

    def test_progress(self, ledger):
        """Test rank lookups read the stored rating."""
        ledger.store.set_category_rating("tech", 1300)
        assert ledger.rank_for("tech").name == "Bronze III"
        assert ledger.progress_for("tech").progress_to_next == pytest.approx(50.0)

    def test_rank_for_rating(self, ledger):
        """Test a bare rating maps to its tier without touching the store."""
        assert ledger.rank_for_rating(1200).name == "Bronze III"
        assert ledger.rank_for_rating(-40).name == "Iron IV"
        assert ledger.rank_for_rating(7500).name == "Challenger"
        assert ledger.snapshot().by_category == {}


class TestResetCategory:
    """Tests for resetting a single category."""

    def test_resets_only_that_category(self, ledger):
        """Test the named category returns to the seed and others are kept."""
        ledger.apply("tech", _delta(60, Result.WIN))
        ledger.apply("finance", _delta(-30, Result.LOSS))

        assert ledger.reset_category(" TECH ") is True

        assert ledger.get_rating("tech") == 1200
        assert ledger.get_rating("finance") == 1170

    def test_history_and_stats_kept(self, ledger):
        """Test a category reset does not erase its record."""
        ledger.apply("tech", _delta(60, Result.WIN))
        ledger.reset_category("tech")

        assert [r.change for r in ledger.store.history("tech")] == [60]
        assert ledger.stats("tech").wins == 1

    def test_unknown_category(self, ledger):
        """Test resetting an unseeded category does nothing."""
        assert ledger.reset_category("astrology") is False
        assert ledger.store.has_category("astrology") is False


class TestSeedFromBaseline:
    """Tests for seeding ratings from a baseline assessment."""

    def test_seeds_named_categories(self, ledger):
        """Test baseline ratings are written and the overall follows them."""
        ledger.apply("history", _delta(60, Result.WIN))

        snapshot = ledger.seed_from_baseline({"Tech": 1400, "finance": 1000.5})

        assert snapshot.by_category == {"history": 1260, "tech": 1400, "finance": 1000.5}
        assert snapshot.overall == pytest.approx((1260 + 1400 + 1000.5) / 3)

    def test_overwrites_existing_rating(self, ledger):
        """Test a baseline replaces a rating already on record."""
        ledger.apply("tech", _delta(60, Result.WIN))
        ledger.seed_from_baseline({"tech": 900})
        assert ledger.get_rating("tech") == 900

    @pytest.mark.parametrize("rating", ["high", None, True, math.nan, math.inf])
    def test_rejects_bad_rating(self, ledger, rating):
        """Test non-numeric and non-finite ratings are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ledger.seed_from_baseline({"finance": 1300, "tech": rating})

        assert exc_info.value.field == "tech"
        assert ledger.snapshot().by_category == {}

    def test_rejects_blank_category(self, ledger):
        """Test a blank category name is rejected."""
        with pytest.raises(ValidationError):
            ledger.seed_from_baseline({" ": 1300})


class TestPerformanceTrend:
    """Tests for the rating trend over a recent window."""

    def test_no_history_is_stable(self, ledger):
        """Test an empty window is stable."""
        trend = ledger.performance_trend()
        assert trend.direction is TrendDirection.STABLE
        assert (trend.change, trend.sessions) == (0.0, 0)

    def test_single_session_is_stable(self, ledger):
        """Test one session is not enough to call a trend."""
        ledger.apply("tech", _delta(60, Result.WIN))
        trend = ledger.performance_trend()
        assert trend.direction is TrendDirection.STABLE
        assert (trend.change, trend.sessions) == (0.0, 1)

    def test_up(self, ledger):
        """Test the change is measured from the first session in the window."""
        ledger.apply("tech", _delta(60, Result.WIN))
        ledger.apply("tech", _delta(15, Result.WIN))
        ledger.apply("tech", _delta(10, Result.WIN))

        trend = ledger.performance_trend()

        assert trend.direction is TrendDirection.UP
        assert trend.change == 25
        assert trend.sessions == 3

    def test_down(self, ledger):
        """Test a drop beyond the threshold trends down."""
        ledger.apply("tech", _delta(10, Result.WIN))
        ledger.apply("tech", _delta(-30, Result.LOSS))

        trend = ledger.performance_trend()

        assert trend.direction is TrendDirection.DOWN
        assert trend.change == -30

    def test_threshold_is_exclusive(self, ledger):
        """Test a change of exactly 20 is still stable."""
        ledger.apply("tech", _delta(5, Result.WIN))
        ledger.apply("tech", _delta(20, Result.WIN))
        assert ledger.performance_trend().direction is TrendDirection.STABLE

    def test_old_sessions_outside_window(self, ledger):
        """Test sessions older than the window are ignored."""
        old = datetime.now(UTC) - timedelta(days=10)
        ledger.get_rating("tech")
        ledger.store.apply_result(
            HistoryRecord("tech", 1200, 1260, 60, "win", timestamp=old)
        )
        ledger.store.apply_result(
            HistoryRecord("tech", 1260, 1320, 60, "win", timestamp=old + timedelta(hours=1))
        )
        ledger.apply("tech", _delta(-5, Result.LOSS))

        assert ledger.performance_trend().sessions == 1
        trend = ledger.performance_trend(days=14)
        assert trend.sessions == 3
        assert trend.direction is TrendDirection.UP

    def test_category_filter(self, ledger):
        """Test the trend can be limited to one category."""
        ledger.apply("tech", _delta(5, Result.WIN))
        ledger.apply("tech", _delta(40, Result.WIN))
        ledger.apply("finance", _delta(-30, Result.LOSS))
        ledger.apply("finance", _delta(-30, Result.LOSS))

        assert ledger.performance_trend(category="Tech").direction is TrendDirection.UP
        assert ledger.performance_trend(category="finance").direction is TrendDirection.DOWN
