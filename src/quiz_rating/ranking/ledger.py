"""Rating ledger: per-category ratings, overall aggregate, and rank lookups."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from statistics import fmean

import structlog

from quiz_rating.core.errors import ValidationError
from quiz_rating.ranking.tiers import RankProgress, RankTier, get_rank, rank_progress
from quiz_rating.ranking.types import (
    CategoryRating,
    PerformanceTrend,
    RatingDelta,
    Result,
    TrendDirection,
)
from quiz_rating.ranking.validation import normalize_category
from quiz_rating.services.storage.base import CategoryStats, HistoryRecord, RatingStore

logger = structlog.get_logger()

# History scanned when deriving streaks
STREAK_WINDOW = 50

# Net rating movement needed before a trend counts as up or down
TREND_THRESHOLD = 20


class RatingLedger:
    """Owns a player's category ratings on top of a RatingStore.

    Each category moves Unseeded -> Seeded on first read and
    Seeded/Updated -> Updated on every applied delta. The overall rating
    is the mean of all seeded categories and is recomputed after each
    write.

    Attributes:
        store: Underlying rating store.
        initial_rating: Seed for unseen categories.
    """

    def __init__(self, store: RatingStore, initial_rating: float = 1200.0) -> None:
        self.store = store
        self.initial_rating = initial_rating

    def get_rating(self, category: str) -> float:
        """Get a category's rating, seeding unseen categories."""
        return self.store.get_category_rating(normalize_category(category), self.initial_rating)

    def snapshot(self) -> CategoryRating:
        """All seeded ratings and their overall mean."""
        ratings = self.store.category_ratings()
        overall = fmean(ratings.values()) if ratings else self.initial_rating
        return CategoryRating(by_category=ratings, overall=overall)

    def apply(
        self,
        category: str,
        delta: RatingDelta,
        difficulty: str = "",
        performance_score: float | None = None,
    ) -> CategoryRating:
        """Apply a rating change to a category.

        Reads the current rating (seeding if needed), then writes
        ``current + delta.elo_change`` unclamped together with its stats and
        history record in a single store operation.

        Args:
            category: Category to update.
            delta: Computed rating change.
            difficulty: Difficulty played, kept in history.
            performance_score: Session score, kept in history.

        Returns:
            CategoryRating snapshot after the write.
        """
        key = normalize_category(category)
        previous = self.store.get_category_rating(key, self.initial_rating)
        new_rating = previous + delta.elo_change

        self.store.apply_result(
            HistoryRecord(
                category=key,
                previous_rating=previous,
                rating=new_rating,
                change=delta.elo_change,
                result=delta.result.value,
                difficulty=difficulty,
                performance_score=performance_score,
            )
        )

        snapshot = self.snapshot()
        logger.info(
            "rating_updated",
            category=key,
            previous=previous,
            rating=new_rating,
            change=delta.elo_change,
            overall=round(snapshot.overall, 1),
        )
        return CategoryRating(
            by_category=snapshot.by_category,
            overall=snapshot.overall,
            category=key,
            previous_rating=previous,
            new_rating=new_rating,
            rank=get_rank(new_rating),
        )

    def rank_for(self, category: str) -> RankTier:
        """Rank tier for a category's current rating."""
        return get_rank(self.get_rating(category))

    def rank_for_rating(self, rating: float) -> RankTier:
        return get_rank(rating)

    def progress_for(self, category: str, change: int = 0) -> RankProgress:
        return rank_progress(self.get_rating(category), change)

    def stats(self, category: str) -> CategoryStats:
        return self.store.category_stats(normalize_category(category))

    def streaks(self) -> tuple[int, int]:
        """Current consecutive (wins, losses) across all categories.

        A draw ends both streaks.
        """
        recent = self.store.history(limit=STREAK_WINDOW)
        if not recent or recent[0].result == Result.DRAW:
            return 0, 0

        latest = recent[0].result
        streak = 0
        for record in recent:
            if record.result != latest:
                break
            streak += 1
        return (streak, 0) if latest == Result.WIN else (0, streak)

    def reset(self) -> None:
        """Return every category to Unseeded."""
        self.store.reset()
        logger.info("ratings_reset", initial_rating=self.initial_rating)

    def reset_category(self, category: str) -> bool:
        """Put one seeded category back at the initial rating.

        Stats and history are kept. Returns False if the category was
        never seeded.
        """
        key = normalize_category(category)
        if not self.store.has_category(key):
            return False
        self.store.set_category_rating(key, self.initial_rating)
        logger.info("category_reset", category=key, rating=self.initial_rating)
        return True

    def seed_from_baseline(self, ratings: Mapping[str, float]) -> CategoryRating:
        """Set category ratings from a baseline assessment.

        Categories not named in ``ratings`` are left alone.

        Args:
            ratings: Category name to starting rating.

        Returns:
            CategoryRating snapshot after seeding.

        Raises:
            ValidationError: If a category is blank or a rating is not a
                finite number.
        """
        seeds: dict[str, float] = {}
        for category, rating in ratings.items():
            key = normalize_category(str(category))
            if isinstance(rating, bool) or not isinstance(rating, int | float):
                raise ValidationError(key, f"expected a number, got {rating!r}")
            if not math.isfinite(rating):
                raise ValidationError(key, "must be a finite number")
            seeds[key] = float(rating)

        for key, rating in seeds.items():
            self.store.set_category_rating(key, rating)

        snapshot = self.snapshot()
        logger.info("baseline_seeded", categories=sorted(seeds), overall=round(snapshot.overall, 1))
        return snapshot

    def performance_trend(self, days: int = 7, category: str | None = None) -> PerformanceTrend:
        """Rating movement over the last ``days`` days.

        The change is measured from the first to the last session in the
        window, so fewer than two sessions is always stable.

        Args:
            days: Window length.
            category: Limit to one category; all categories if None.

        Returns:
            PerformanceTrend for the window.
        """
        key = normalize_category(category) if category is not None else None
        cutoff = datetime.now(UTC) - timedelta(days=days)
        window = [r for r in reversed(self.store.history(key)) if _as_utc(r.timestamp) >= cutoff]

        if len(window) < 2:
            return PerformanceTrend(TrendDirection.STABLE, 0.0, len(window))

        change = window[-1].rating - window[0].rating
        if change > TREND_THRESHOLD:
            direction = TrendDirection.UP
        elif change < -TREND_THRESHOLD:
            direction = TrendDirection.DOWN
        else:
            direction = TrendDirection.STABLE
        return PerformanceTrend(direction, change, len(window))


def _as_utc(timestamp: datetime) -> datetime:
    # SQL backends hand back naive UTC timestamps
    return timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=UTC)
