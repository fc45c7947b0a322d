"""Performance scoring and outcome classification for quiz sessions."""

from __future__ import annotations

from quiz_rating.ranking.types import Result

MAX_PERFORMANCE_SCORE = 100.0
ACCURACY_WEIGHT = 60.0

# (minimum questions answered, points), highest first
VOLUME_STEPS: tuple[tuple[int, float], ...] = (
    (20, 40.0),
    (15, 30.0),
    (10, 20.0),
    (5, 10.0),
)

_DESCRIPTIONS: tuple[tuple[float, str], ...] = (
    (95, "Perfect Performance!"),
    (85, "Excellent Game!"),
    (75, "Great Performance!"),
    (65, "Good Game!"),
    (55, "Decent Performance"),
    (45, "Room for Improvement"),
    (35, "Keep Practicing"),
    (25, "Tough Game"),
)


def calculate_volume_score(questions_answered: int) -> float:
    """Points awarded for how many questions were attempted (0-40)."""
    for minimum, points in VOLUME_STEPS:
        if questions_answered >= minimum:
            return points
    return 0.0


def calculate_performance_score(accuracy_percent: float, questions_answered: int) -> float:
    """Calculate the 0-100 performance score for a session.

    Accuracy contributes up to 60 points and question volume up to 40:

        score = min(100, accuracy / 100 * 60 + volume_score)

    Args:
        accuracy_percent: Accuracy in [0, 100].
        questions_answered: Number of non-skipped attempts.

    Returns:
        Performance score in [0, 100].
    """
    accuracy_score = accuracy_percent / 100 * ACCURACY_WEIGHT
    volume_score = calculate_volume_score(questions_answered)
    return min(MAX_PERFORMANCE_SCORE, accuracy_score + volume_score)


def classify_outcome(
    performance_score: float,
    win_threshold: float = 70.0,
    draw_threshold: float = 50.0,
) -> Result:
    """Map a performance score to win, draw, or loss.

    Args:
        performance_score: Score in [0, 100].
        win_threshold: Minimum score for a win.
        draw_threshold: Minimum score for a draw.

    Returns:
        The session result.
    """
    if performance_score >= win_threshold:
        return Result.WIN
    if performance_score >= draw_threshold:
        return Result.DRAW
    return Result.LOSS


def describe_performance(performance_score: float) -> str:
    """Player-facing summary of a performance score."""
    for minimum, text in _DESCRIPTIONS:
        if performance_score >= minimum:
            return text
    return "Better Luck Next Time"
