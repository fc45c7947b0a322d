"""Shared repository helpers for SQLModel session work."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import Session, SQLModel, create_engine

from quiz_rating.core.errors import StorageError

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")


def create_db_engine(db_url: str) -> Engine:
    """Create an engine and make sure all tables exist.

    In-memory SQLite shares one connection so every session sees the same
    database; everything else gets a NullPool.

    Args:
        db_url: SQLAlchemy database URL (DuckDB, SQLite, ...).

    Returns:
        Engine with tables created.

    Raises:
        StorageError: If the database cannot be opened.
    """
    try:
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            engine = create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(db_url, poolclass=NullPool)
        SQLModel.metadata.create_all(engine)
    except SQLAlchemyError as e:
        msg = f"Could not open database {db_url}: {e}"
        raise StorageError(msg, "Check the storage.db_url setting.") from e
    return engine


class Repository:
    """Run SQLModel session work and translate driver failures."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run a function inside a fresh Session."""
        try:
            with Session(self._engine) as session:
                return fn(session)
        except SQLAlchemyError as e:
            raise StorageError(f"Database operation failed: {e}") from e
