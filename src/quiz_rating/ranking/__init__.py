"""Competitive rating engine.

Scores a finished quiz session, classifies it as a win, draw or loss,
turns it into a capped rating change and derives currency rewards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quiz_rating.ranking.delta import calculate_rating_delta
from quiz_rating.ranking.engine import CompetitiveRatingEngine
from quiz_rating.ranking.ledger import RatingLedger
from quiz_rating.ranking.modifiers import compute_modifiers
from quiz_rating.ranking.performance import calculate_performance_score, classify_outcome
from quiz_rating.ranking.rewards import grant_rewards, synthesize_rewards
from quiz_rating.ranking.tiers import RankTier, get_rank, rank_progress
from quiz_rating.ranking.types import (
    CategoryRating,
    Difficulty,
    GrantReport,
    ModifierBreakdown,
    Outcome,
    PerformanceTrend,
    RatingDelta,
    Result,
    RewardKind,
    RewardLine,
    SessionOutcome,
    SessionPerformance,
    SessionResult,
    TrendDirection,
)
from quiz_rating.services.storage import create_stores

if TYPE_CHECKING:
    from quiz_rating.core.config import EngineConfig


def create_rating_engine(
    config: EngineConfig,
    dry_run: bool = False,
) -> CompetitiveRatingEngine:
    """Create a rating engine backed by the configured stores.

    Args:
        config: Engine configuration.
        dry_run: Use in-memory stores instead of the database.

    Returns:
        Configured engine.
    """
    store, currency = create_stores(config.storage.get_db_url(), dry_run=dry_run)
    return CompetitiveRatingEngine(store, currency, config)


__all__ = [
    "CategoryRating",
    "CompetitiveRatingEngine",
    "Difficulty",
    "GrantReport",
    "ModifierBreakdown",
    "Outcome",
    "PerformanceTrend",
    "RankTier",
    "RatingDelta",
    "RatingLedger",
    "Result",
    "RewardKind",
    "RewardLine",
    "SessionOutcome",
    "SessionPerformance",
    "SessionResult",
    "TrendDirection",
    "calculate_performance_score",
    "calculate_rating_delta",
    "classify_outcome",
    "compute_modifiers",
    "create_rating_engine",
    "get_rank",
    "grant_rewards",
    "rank_progress",
    "synthesize_rewards",
]
