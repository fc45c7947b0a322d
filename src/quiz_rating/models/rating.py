import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class CategoryRatingRecord(SQLModel, table=True):
    """Current rating and running results for one category."""

    category: str = Field(primary_key=True)
    rating: float
    peak_rating: float
    sessions: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RatingHistoryEntry(SQLModel, table=True):
    """A single applied rating change."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    category: str = Field(index=True)
    previous_rating: float
    rating: float
    change: int
    result: str  # "win", "draw", "loss"
    difficulty: str = ""
    performance_score: float | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
