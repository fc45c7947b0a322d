"""Coin grant model for the currency ledger."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class CoinTransaction(SQLModel, table=True):
    """A coin grant with its reason code."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    amount: int
    reason_code: str = Field(index=True)
    details: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
