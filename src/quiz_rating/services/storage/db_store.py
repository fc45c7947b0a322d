"""Database storage for ratings, history, and coin grants using SQLModel."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel import Session, col, select

from quiz_rating.models import CategoryRatingRecord, CoinTransaction, RatingHistoryEntry

from .base import CategoryStats, HistoryRecord
from .repository import Repository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class DBRatingStore(Repository):
    """RatingStore persisted in SQL tables."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    def get_category_rating(self, category: str, default: float = 1200.0) -> float:
        """Get the rating for a category, seeding it if absent."""

        def _get(session: Session) -> float:
            record = session.get(CategoryRatingRecord, category)
            if record is not None:
                return record.rating
            seeded = CategoryRatingRecord(category=category, rating=default, peak_rating=default)
            session.add(seeded)
            session.commit()
            logger.debug("category_seeded", category=category, rating=default)
            return default

        return self._run_session(_get)

    def has_category(self, category: str) -> bool:
        def _has(session: Session) -> bool:
            return session.get(CategoryRatingRecord, category) is not None

        return self._run_session(_has)

    def set_category_rating(self, category: str, rating: float) -> None:
        """Write the rating for a category, creating the row if needed."""

        def _set(session: Session) -> None:
            record = session.get(CategoryRatingRecord, category)
            if record is None:
                record = CategoryRatingRecord(category=category, rating=rating, peak_rating=rating)
            else:
                record.rating = rating
                record.peak_rating = max(record.peak_rating, rating)
                record.updated_at = datetime.now(UTC)
            session.add(record)
            session.commit()

        self._run_session(_set)

    def category_ratings(self) -> dict[str, float]:
        def _all(session: Session) -> dict[str, float]:
            records = session.exec(select(CategoryRatingRecord)).all()
            return {r.category: r.rating for r in records}

        return self._run_session(_all)

    def apply_result(self, record: HistoryRecord) -> None:
        """Write the new rating, bump the counters and append history in one commit."""

        def _apply(session: Session) -> None:
            stats = session.get(CategoryRatingRecord, record.category)
            if stats is None:
                stats = CategoryRatingRecord(
                    category=record.category,
                    rating=record.rating,
                    peak_rating=max(record.previous_rating, record.rating),
                )
            stats.rating = record.rating
            stats.peak_rating = max(stats.peak_rating, record.rating)
            stats.updated_at = datetime.now(UTC)
            stats.sessions += 1
            if record.result == "win":
                stats.wins += 1
            elif record.result == "draw":
                stats.draws += 1
            else:
                stats.losses += 1
            session.add(stats)
            session.add(
                RatingHistoryEntry(
                    category=record.category,
                    previous_rating=record.previous_rating,
                    rating=record.rating,
                    change=record.change,
                    result=record.result,
                    difficulty=record.difficulty,
                    performance_score=record.performance_score,
                    timestamp=record.timestamp,
                )
            )
            session.commit()

        self._run_session(_apply)

    def history(self, category: str | None = None, limit: int | None = None) -> list[HistoryRecord]:
        """History records, newest first."""

        def _get(session: Session) -> list[HistoryRecord]:
            statement = select(RatingHistoryEntry)
            if category is not None:
                statement = statement.where(RatingHistoryEntry.category == category)
            statement = statement.order_by(col(RatingHistoryEntry.timestamp).desc())
            if limit is not None:
                statement = statement.limit(limit)
            return [
                HistoryRecord(
                    category=row.category,
                    previous_rating=row.previous_rating,
                    rating=row.rating,
                    change=row.change,
                    result=row.result,
                    difficulty=row.difficulty,
                    performance_score=row.performance_score,
                    timestamp=row.timestamp,
                )
                for row in session.exec(statement).all()
            ]

        return self._run_session(_get)

    def category_stats(self, category: str) -> CategoryStats:
        def _get(session: Session) -> CategoryStats:
            record = session.get(CategoryRatingRecord, category)
            if record is None:
                return CategoryStats()
            return CategoryStats(
                sessions=record.sessions,
                wins=record.wins,
                draws=record.draws,
                losses=record.losses,
                peak_rating=record.peak_rating,
            )

        return self._run_session(_get)

    def reset(self) -> None:
        def _reset(session: Session) -> None:
            for model in (RatingHistoryEntry, CategoryRatingRecord):
                for row in session.exec(select(model)).all():
                    session.delete(row)
            session.commit()

        self._run_session(_reset)


class DBCurrencyLedger(Repository):
    """CurrencyLedger persisted as coin transactions."""

    def __init__(self, engine: Engine, starting_balance: int = 0) -> None:
        super().__init__(engine)
        self._starting_balance = starting_balance

    def grant(self, amount: int, reason_code: str, metadata: dict[str, Any] | None = None) -> bool:
        """Record a coin grant. Negative amounts are refused."""
        if amount < 0:
            logger.warning("negative_grant_refused", amount=amount, reason=reason_code)
            return False

        def _grant(session: Session) -> bool:
            transaction = CoinTransaction(
                amount=amount, reason_code=reason_code, details=dict(metadata or {})
            )
            session.add(transaction)
            session.commit()
            return True

        return self._run_session(_grant)

    def balance(self) -> int:
        def _balance(session: Session) -> int:
            amounts = session.exec(select(CoinTransaction.amount)).all()
            return self._starting_balance + sum(amounts)

        return self._run_session(_balance)

    def transactions(self, limit: int | None = None) -> list[CoinTransaction]:
        """Recent transactions, newest first."""

        def _get(session: Session) -> list[CoinTransaction]:
            statement = select(CoinTransaction).order_by(col(CoinTransaction.timestamp).desc())
            if limit is not None:
                statement = statement.limit(limit)
            return list(session.exec(statement).all())

        return self._run_session(_get)
