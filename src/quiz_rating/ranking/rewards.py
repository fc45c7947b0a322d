"""Currency rewards derived from a session's outcome."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from quiz_rating.core.config import RewardConfig
from quiz_rating.ranking.types import (
    Difficulty,
    GrantReport,
    RatingDelta,
    RewardKind,
    RewardLine,
    SessionPerformance,
)
from quiz_rating.services.storage.base import CurrencyLedger

logger = structlog.get_logger()

PERFECT_SCORE = 95.0
EXCELLENT_SCORE = 85.0
VOLUME_HIGH = 20
VOLUME_LOW = 15


def rating_reward(elo_change: int) -> RewardLine:
    """The single rating-outcome line for a rating change."""
    if elo_change > 0:
        return RewardLine(RewardKind.RATING_GAIN, elo_change, f"Rating +{elo_change}")
    if elo_change < 0:
        return RewardLine(RewardKind.RATING_LOSS, -elo_change, f"Rating {elo_change}")
    return RewardLine(RewardKind.RATING_DRAW, 0, "Rating Stable")


def synthesize_rewards(
    delta: RatingDelta,
    session: SessionPerformance,
    performance_score: float,
    config: RewardConfig | None = None,
) -> list[RewardLine]:
    """Derive the ordered reward lines for a session.

    Always one rating-outcome line, followed by up to three bonuses:
    performance tier, question volume, and hard difficulty.

    Args:
        delta: Rating change for the session.
        session: The session record.
        performance_score: Session performance score.
        config: Bonus amounts (defaults if None).

    Returns:
        Between one and four reward lines.
    """
    config = config or RewardConfig()
    rewards = [rating_reward(delta.elo_change)]

    if performance_score >= PERFECT_SCORE:
        rewards.append(
            RewardLine(RewardKind.PERFORMANCE_BONUS, config.perfect_bonus, "Perfect Performance")
        )
    elif performance_score >= EXCELLENT_SCORE:
        rewards.append(
            RewardLine(RewardKind.PERFORMANCE_BONUS, config.excellent_bonus, "Excellent Game")
        )

    if session.questions_answered >= VOLUME_HIGH:
        rewards.append(
            RewardLine(RewardKind.VOLUME_BONUS, config.volume_bonus_high, "Question Marathon")
        )
    elif session.questions_answered >= VOLUME_LOW:
        rewards.append(
            RewardLine(RewardKind.VOLUME_BONUS, config.volume_bonus_low, "Question Master")
        )

    if session.difficulty_tier is Difficulty.HARD:
        rewards.append(RewardLine(RewardKind.DIFFICULTY_BONUS, config.hard_bonus, "Hard Mode"))

    return rewards


def grant_rewards(
    rewards: Sequence[RewardLine],
    ledger: CurrencyLedger,
    metadata: dict[str, Any] | None = None,
) -> GrantReport:
    """Submit each reward line to the currency ledger.

    Lines are granted independently: a refused or failing grant is
    reported and the remaining lines are still attempted. Zero-amount
    lines count as granted without touching the ledger.

    Args:
        rewards: Lines to grant.
        ledger: Currency ledger collaborator.
        metadata: Extra context stored with every grant.

    Returns:
        GrantReport listing granted and failed lines.
    """
    granted: list[RewardLine] = []
    failed: list[RewardLine] = []

    for line in rewards:
        if line.amount == 0:
            granted.append(line)
            continue

        details = {**(metadata or {}), "label": line.label}
        try:
            ok = ledger.grant(line.amount, line.kind.value, details)
        except Exception as e:
            logger.warning(
                "reward_grant_failed",
                kind=line.kind.value,
                amount=line.amount,
                error=str(e),
                exc_info=True,
            )
            failed.append(line)
            continue

        if ok:
            granted.append(line)
        else:
            logger.warning("reward_grant_refused", kind=line.kind.value, amount=line.amount)
            failed.append(line)

    report = GrantReport(granted=granted, failed=failed)
    logger.debug("rewards_granted", total=report.total_granted, failed=len(failed))
    return report
