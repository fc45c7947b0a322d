"""Competitive rating engine: session in, outcome, rating change and rewards out."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import structlog

from quiz_rating.core.config import EngineConfig
from quiz_rating.core.errors import RatingPersistenceError, StorageError
from quiz_rating.ranking.delta import calculate_rating_delta
from quiz_rating.ranking.ledger import RatingLedger
from quiz_rating.ranking.modifiers import compute_modifiers
from quiz_rating.ranking.performance import (
    calculate_performance_score,
    classify_outcome,
    describe_performance,
)
from quiz_rating.ranking.rewards import grant_rewards, synthesize_rewards
from quiz_rating.ranking.types import (
    CategoryRating,
    GrantReport,
    Outcome,
    RatingDelta,
    RewardLine,
    SessionOutcome,
    SessionPerformance,
    SessionResult,
)
from quiz_rating.ranking.validation import normalize_category, validate_session
from quiz_rating.services.storage.base import CurrencyLedger, RatingStore

logger = structlog.get_logger()


class CompetitiveRatingEngine:
    """Turns completed quiz sessions into rating changes and rewards.

    Computation (`compute_session_outcome`) is pure. Only
    `apply_rating_update` writes ratings and only `grant_rewards` touches
    the currency ledger.

    Attributes:
        ledger: Rating ledger wrapping the injected store.
        currency: Currency ledger collaborator.
        config: Engine configuration.
    """

    def __init__(
        self,
        store: RatingStore,
        currency: CurrencyLedger,
        config: EngineConfig | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Per-category rating store.
            currency: Currency ledger that receives reward grants.
            config: Engine configuration (defaults if None).
        """
        self.config = config or EngineConfig()
        self.ledger = RatingLedger(store, initial_rating=self.config.rating.initial_rating)
        self.currency = currency

    def compute_session_outcome(self, session: SessionPerformance) -> SessionOutcome:
        """Compute outcome, rating change and rewards for a session.

        Args:
            session: Completed session record.

        Returns:
            SessionOutcome with the full modifier breakdown.

        Raises:
            ValidationError: If the session is malformed.
        """
        rating_config = self.config.rating
        validate_session(session, rating_config.accuracy_tolerance)

        score = calculate_performance_score(session.accuracy, session.questions_answered)
        result = classify_outcome(
            score,
            win_threshold=rating_config.win_threshold,
            draw_threshold=rating_config.draw_threshold,
        )
        breakdown = compute_modifiers(session, result, score, rating_config)
        delta = calculate_rating_delta(
            result,
            breakdown,
            max_gain=rating_config.max_gain,
            max_loss=rating_config.max_loss,
        )
        rewards = synthesize_rewards(delta, session, score, self.config.rewards)

        logger.debug(
            "session_scored",
            category=session.category,
            score=round(score, 2),
            result=result.value,
            change=delta.elo_change,
            raw=round(delta.raw_change, 2),
        )
        return SessionOutcome(
            outcome=Outcome(result=result, performance_score=score),
            delta=delta,
            rewards=rewards,
            description=describe_performance(score),
            pace_ratio=session.pace_ratio,
        )

    def apply_rating_update(
        self,
        category: str,
        delta: RatingDelta,
        *,
        difficulty: str = "",
        performance_score: float | None = None,
    ) -> CategoryRating:
        """Persist a rating change for a category.

        Args:
            category: Category to update.
            delta: Rating change from `compute_session_outcome`.
            difficulty: Difficulty played, recorded in history.
            performance_score: Session score, recorded in history.

        Returns:
            CategoryRating after the write.

        Raises:
            RatingPersistenceError: If the store fails; carries ``delta``.
        """
        try:
            return self.ledger.apply(
                category,
                delta,
                difficulty=difficulty,
                performance_score=performance_score,
            )
        except StorageError as e:
            logger.error("rating_update_failed", category=category, change=delta.elo_change)
            raise RatingPersistenceError(category, delta, e) from e

    def grant_rewards(
        self,
        rewards: list[RewardLine],
        metadata: dict[str, Any] | None = None,
    ) -> GrantReport:
        """Submit reward lines to the currency ledger, one at a time."""
        return grant_rewards(rewards, self.currency, metadata)

    def load_session(self, data: Mapping[str, Any]) -> SessionPerformance:
        """Build a session from a raw record, filling gaps from the ledger.

        A missing current rating is read from the ledger (seeding unknown
        categories) and missing streaks come from the rating history.

        Args:
            data: Raw session mapping (snake_case or camelCase keys).

        Returns:
            SessionPerformance ready for `compute_session_outcome`.
        """
        raw = dict(data)
        category = raw.get("category")
        current_rating = None
        if isinstance(category, str) and category.strip():
            raw["category"] = normalize_category(category)
            if raw.get("current_rating") is None and raw.get("currentRating") is None:
                current_rating = self.ledger.get_rating(raw["category"])

        session = SessionPerformance.from_mapping(raw, current_rating=current_rating)

        has_streaks = any(
            key in raw for key in ("win_streak", "winStreak", "loss_streak", "lossStreak")
        )
        if not has_streaks:
            win_streak, loss_streak = self.ledger.streaks()
            session = replace(session, win_streak=win_streak, loss_streak=loss_streak)
        return session

    def process_session(self, session: SessionPerformance) -> SessionResult:
        """Compute, persist and reward a session.

        Rewards are granted only after the rating write succeeds.

        Args:
            session: Completed session record.

        Returns:
            SessionResult with the outcome, new ratings and grant report.

        Raises:
            ValidationError: If the session is malformed.
            RatingPersistenceError: If the rating could not be written.
        """
        outcome = self.compute_session_outcome(session)
        rating = self.apply_rating_update(
            session.category,
            outcome.delta,
            difficulty=session.difficulty,
            performance_score=outcome.outcome.performance_score,
        )
        grants = self.grant_rewards(
            outcome.rewards,
            metadata={
                "category": rating.category,
                "result": outcome.delta.result.value,
                "elo_change": outcome.delta.elo_change,
            },
        )
        if not grants.ok:
            logger.warning(
                "rewards_partially_granted",
                failed=[line.kind.value for line in grants.failed],
            )
        return SessionResult(session=session, outcome=outcome, rating=rating, grants=grants)
