"""The five multiplicative factors behind a rating change."""

from __future__ import annotations

import structlog

from quiz_rating.core.config import RatingConfig
from quiz_rating.ranking.types import Difficulty, ModifierBreakdown, Result, SessionPerformance

logger = structlog.get_logger()

# (minimum performance score, multiplier), highest first
PERFORMANCE_MODIFIERS: tuple[tuple[float, float], ...] = (
    (95, 2.0),
    (85, 1.5),
    (75, 1.2),
    (65, 1.0),
    (55, 0.8),
    (45, 0.6),
    (35, 0.4),
    (25, 0.2),
)
MIN_PERFORMANCE_MODIFIER = 0.1

# difficulty -> (low rank multiplier, everyone else)
DIFFICULTY_MODIFIERS: dict[Difficulty, tuple[float, float]] = {
    Difficulty.EASY: (1.0, 0.85),
    Difficulty.MEDIUM: (0.9, 1.0),
    Difficulty.HARD: (0.8, 1.3),
}

WIN_STREAK_MODIFIERS: tuple[tuple[int, float], ...] = ((10, 1.5), (7, 1.3), (5, 1.2), (3, 1.1))
LOSS_STREAK_MODIFIERS: tuple[tuple[int, float], ...] = ((5, 0.7), (3, 0.8))


def get_base_change(result: Result, base_change: float = 25.0) -> float:
    """Anchor change before modifiers: +base for a win, -base for a loss, 0 for a draw."""
    if result is Result.WIN:
        return base_change
    if result is Result.LOSS:
        return -base_change
    return 0.0


def calculate_performance_modifier(performance_score: float) -> float:
    """Map a performance score to a multiplier between 0.1x and 2.0x."""
    for minimum, multiplier in PERFORMANCE_MODIFIERS:
        if performance_score >= minimum:
            return multiplier
    return MIN_PERFORMANCE_MODIFIER


def get_difficulty_modifier(
    difficulty: Difficulty | str,
    current_rating: float,
    low_rank_threshold: float = 2000.0,
) -> float:
    """Get the difficulty multiplier.

    Players below ``low_rank_threshold`` are protected on hard content,
    while higher ranks are discouraged from farming easy content.
    Unknown difficulty names fall back to a neutral 1.0.

    Args:
        difficulty: Difficulty tier or its name.
        current_rating: Rating before the session.
        low_rank_threshold: Ratings below this count as low rank.

    Returns:
        Difficulty multiplier.
    """
    tier = difficulty if isinstance(difficulty, Difficulty) else Difficulty.parse(difficulty)
    if tier is None:
        logger.warning("unknown_difficulty", difficulty=difficulty, modifier=1.0)
        return 1.0

    low_rank, default = DIFFICULTY_MODIFIERS[tier]
    return low_rank if current_rating < low_rank_threshold else default


def get_rank_modifier(
    current_rating: float,
    gold_threshold: float = 4160.0,
    rank_step: float = 200.0,
    step_bonus: float = 0.10,
    max_modifier: float = 3.5,
) -> float:
    """Catch-up bonus for ratings below the gold threshold.

    Adds ``step_bonus`` for every ``rank_step`` points below the
    threshold, capped at ``max_modifier``.
    """
    if current_rating >= gold_threshold:
        return 1.0

    distance = gold_threshold - current_rating
    return min(max_modifier, 1.0 + (distance / rank_step) * step_bonus)


def get_streak_modifier(result: Result, win_streak: int, loss_streak: int) -> float:
    """Amplify win-streak gains and soften loss-streak losses."""
    if result is Result.WIN:
        steps, streak = WIN_STREAK_MODIFIERS, win_streak
    elif result is Result.LOSS:
        steps, streak = LOSS_STREAK_MODIFIERS, loss_streak
    else:
        return 1.0

    for minimum, multiplier in steps:
        if streak >= minimum:
            return multiplier
    return 1.0


def compute_modifiers(
    session: SessionPerformance,
    result: Result,
    performance_score: float,
    config: RatingConfig | None = None,
) -> ModifierBreakdown:
    """Compute the full modifier set for a session.

    Args:
        session: Validated session record.
        result: Classified session result.
        performance_score: Score the result was classified from.
        config: Rating constants (defaults if None).

    Returns:
        ModifierBreakdown with all five factors.
    """
    config = config or RatingConfig()
    return ModifierBreakdown(
        base_change=get_base_change(result, config.base_change),
        performance_modifier=calculate_performance_modifier(performance_score),
        difficulty_modifier=get_difficulty_modifier(
            session.difficulty, session.current_rating, config.low_rank_threshold
        ),
        rank_modifier=get_rank_modifier(
            session.current_rating,
            gold_threshold=config.gold_threshold,
            rank_step=config.rank_step,
            step_bonus=config.rank_step_bonus,
            max_modifier=config.max_rank_modifier,
        ),
        streak_modifier=get_streak_modifier(result, session.win_streak, session.loss_streak),
    )
