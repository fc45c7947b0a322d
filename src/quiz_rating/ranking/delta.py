"""Rating change calculation from a modifier set."""

from __future__ import annotations

import math

from quiz_rating.ranking.types import ModifierBreakdown, RatingDelta, Result


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def calculate_rating_delta(
    result: Result,
    breakdown: ModifierBreakdown,
    max_gain: int = 60,
    max_loss: int = 30,
) -> RatingDelta:
    """Compose the modifiers into a capped rating change.

    The factors are multiplied and rounded; wins and draws are capped at
    ``+max_gain`` and losses at ``-max_loss``. The cap is asymmetric so a
    loss is always softer than the equivalent win.

    Args:
        result: Session result.
        breakdown: The five modifiers for the session.
        max_gain: Upper cap for wins and draws.
        max_loss: Magnitude of the lower cap for losses.

    Returns:
        RatingDelta carrying the capped change and the breakdown.
    """
    raw = breakdown.product
    rounded = round_half_up(raw)

    if result is Result.LOSS:
        change = max(-max_loss, rounded)
    else:
        change = min(max_gain, rounded)

    return RatingDelta(elo_change=change, result=result, breakdown=breakdown, raw_change=raw)
