"""Tests for performance scoring and outcome classification."""

import pytest

from quiz_rating.ranking.performance import (
    calculate_performance_score,
    calculate_volume_score,
    classify_outcome,
    describe_performance,
)
from quiz_rating.ranking.types import Result


class TestVolumeScore:
    """Tests for the question-volume step function."""

    @pytest.mark.parametrize(
        ("answered", "expected"),
        [
            (0, 0),
            (4, 0),
            (5, 10),
            (9, 10),
            (10, 20),
            (14, 20),
            (15, 30),
            (19, 30),
            (20, 40),
            (50, 40),
        ],
    )
    def test_steps(self, answered, expected):
        """Test each volume step boundary."""
        assert calculate_volume_score(answered) == expected


class TestPerformanceScore:
    """Tests for the 0-100 performance score."""

    def test_perfect_session(self):
        """Test full accuracy with 20 answers scores 100."""
        assert calculate_performance_score(100, 20) == 100

    def test_accuracy_weighted_to_sixty(self):
        """Test accuracy alone contributes at most 60 points."""
        assert calculate_performance_score(100, 0) == pytest.approx(60.0)
        assert calculate_performance_score(50, 0) == pytest.approx(30.0)

    def test_mixed_session(self):
        """Test accuracy and volume add up."""
        # 60% -> 36 points, 12 answered -> 20 points
        assert calculate_performance_score(60, 12) == pytest.approx(56.0)

    def test_capped_at_hundred(self):
        """Test the score never exceeds 100."""
        assert calculate_performance_score(100, 100) == 100

    def test_zero_session(self):
        """Test an empty session scores zero."""
        assert calculate_performance_score(0, 0) == 0

    def test_monotonic_in_accuracy(self):
        """Test more accuracy never lowers the score."""
        for answered in (0, 5, 12, 17, 25):
            scores = [calculate_performance_score(acc, answered) for acc in range(101)]
            assert scores == sorted(scores)


class TestClassifyOutcome:
    """Tests for win/draw/loss thresholds."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, Result.WIN),
            (70, Result.WIN),
            (69.99, Result.DRAW),
            (50, Result.DRAW),
            (49.99, Result.LOSS),
            (0, Result.LOSS),
        ],
    )
    def test_thresholds(self, score, expected):
        """Test the 70/50 boundaries."""
        assert classify_outcome(score) is expected

    def test_custom_thresholds(self):
        """Test thresholds can be configured."""
        assert classify_outcome(60, win_threshold=60, draw_threshold=40) is Result.WIN
        assert classify_outcome(45, win_threshold=60, draw_threshold=40) is Result.DRAW

    def test_outcome_consistency(self):
        """Test win iff score >= 70 and loss iff score < 50."""
        for tenth in range(0, 1001):
            score = tenth / 10
            result = classify_outcome(score)
            assert (result is Result.WIN) == (score >= 70)
            assert (result is Result.LOSS) == (score < 50)


class TestDescribePerformance:
    """Tests for player-facing performance text."""

    def test_descriptions(self):
        """Test a few representative tiers."""
        assert describe_performance(100) == "Perfect Performance!"
        assert describe_performance(90) == "Excellent Game!"
        assert describe_performance(56) == "Decent Performance"
        assert describe_performance(10) == "Better Luck Next Time"
