"""In-memory rating store and currency ledger for tests and dry runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import structlog

from .base import CategoryStats, HistoryRecord

logger = structlog.get_logger()


class InMemoryRatingStore:
    """Dict-backed RatingStore."""

    def __init__(self, ratings: dict[str, float] | None = None) -> None:
        self._ratings: dict[str, float] = dict(ratings or {})
        self._history: list[HistoryRecord] = []

    def get_category_rating(self, category: str, default: float = 1200.0) -> float:
        if category not in self._ratings:
            self._ratings[category] = default
            logger.debug("category_seeded", category=category, rating=default)
        return self._ratings[category]

    def has_category(self, category: str) -> bool:
        return category in self._ratings

    def set_category_rating(self, category: str, rating: float) -> None:
        self._ratings[category] = rating

    def category_ratings(self) -> dict[str, float]:
        return dict(self._ratings)

    def apply_result(self, record: HistoryRecord) -> None:
        self._ratings[record.category] = record.rating
        self._history.append(record)

    def history(self, category: str | None = None, limit: int | None = None) -> list[HistoryRecord]:
        records = [r for r in reversed(self._history) if category is None or r.category == category]
        return records[:limit] if limit is not None else records

    def category_stats(self, category: str) -> CategoryStats:
        records = self.history(category)
        if not records:
            return CategoryStats()
        return CategoryStats(
            sessions=len(records),
            wins=sum(1 for r in records if r.result == "win"),
            draws=sum(1 for r in records if r.result == "draw"),
            losses=sum(1 for r in records if r.result == "loss"),
            peak_rating=max(max(r.rating, r.previous_rating) for r in records),
        )

    def reset(self) -> None:
        self._ratings.clear()
        self._history.clear()


@dataclass(frozen=True)
class LedgerEntry:
    """A coin grant accepted by the in-memory ledger."""

    amount: int
    reason_code: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class InMemoryCurrencyLedger:
    """List-backed CurrencyLedger."""

    def __init__(self, starting_balance: int = 0) -> None:
        self._starting_balance = starting_balance
        self.entries: list[LedgerEntry] = []

    def grant(self, amount: int, reason_code: str, metadata: dict[str, Any] | None = None) -> bool:
        if amount < 0:
            return False
        self.entries.append(LedgerEntry(amount, reason_code, dict(metadata or {})))
        return True

    def balance(self) -> int:
        return self._starting_balance + sum(e.amount for e in self.entries)
