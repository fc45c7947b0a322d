"""Protocols for the rating store and currency ledger collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class HistoryRecord:
    """One applied rating change.

    Attributes:
        category: Category the change was applied to.
        previous_rating: Rating before the change.
        rating: Rating after the change.
        change: Applied change.
        result: Session result ("win", "draw", "loss").
        difficulty: Difficulty the session was played at.
        performance_score: Session performance score.
        timestamp: When the change was applied.
    """

    category: str
    previous_rating: float
    rating: float
    change: int
    result: str
    difficulty: str = ""
    performance_score: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class CategoryStats:
    """Aggregate results for one category."""

    sessions: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    peak_rating: float | None = None

    @property
    def win_rate(self) -> int:
        """Win percentage over decided sessions, rounded."""
        decided = self.wins + self.losses
        return round(self.wins / decided * 100) if decided else 0


@runtime_checkable
class RatingStore(Protocol):
    """Persistent per-category ratings for one player.

    Implementations are single-writer; callers serialize access.
    """

    def get_category_rating(self, category: str, default: float = 1200.0) -> float:
        """Get the rating for a category, seeding it with ``default`` if absent."""
        ...

    def has_category(self, category: str) -> bool:
        """Whether a category has been seeded."""
        ...

    def set_category_rating(self, category: str, rating: float) -> None:
        """Write the rating for a category."""
        ...

    def category_ratings(self) -> dict[str, float]:
        """All seeded categories and their ratings."""
        ...

    def apply_result(self, record: HistoryRecord) -> None:
        """Write ``record.rating``, the category's stats and the history record.

        All three land together or not at all.
        """
        ...

    def history(self, category: str | None = None, limit: int | None = None) -> list[HistoryRecord]:
        """History records, newest first."""
        ...

    def category_stats(self, category: str) -> CategoryStats:
        """Aggregate results for a category."""
        ...

    def reset(self) -> None:
        """Forget every category, its stats and history."""
        ...


@runtime_checkable
class CurrencyLedger(Protocol):
    """Coin balance collaborator."""

    def grant(self, amount: int, reason_code: str, metadata: dict[str, Any] | None = None) -> bool:
        """Credit coins. Returns False when the grant was not applied."""
        ...

    def balance(self) -> int:
        """Current coin balance."""
        ...
