"""Configuration schemas and loading for the rating engine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from quiz_rating.core.errors import ConfigurationError

DEFAULT_DB_URL = "duckdb:///quiz_rating.duckdb"
DB_URL_ENV_VAR = "QUIZ_RATING_DB_URL"


class RatingConfig(BaseModel):
    """Rating computation constants.

    Attributes:
        initial_rating: Seed rating for categories never played.
        win_threshold: Minimum performance score counted as a win.
        draw_threshold: Minimum performance score counted as a draw.
        base_change: Magnitude of the base change for a win or loss.
        max_gain: Upper cap on a single rating change.
        max_loss: Magnitude of the lower cap on a single rating change.
        low_rank_threshold: Ratings below this get difficulty protection.
        gold_threshold: Ratings below this get the catch-up rank bonus.
        rank_step: Rating points per rank bonus step.
        rank_step_bonus: Multiplier added per rank bonus step.
        max_rank_modifier: Cap on the rank modifier.
        accuracy_tolerance: Allowed gap (percentage points) between a
            reported accuracy and correct/answered.
    """

    initial_rating: float = 1200.0
    win_threshold: float = Field(default=70.0, ge=0, le=100)
    draw_threshold: float = Field(default=50.0, ge=0, le=100)
    base_change: float = Field(default=25.0, ge=0)
    max_gain: int = Field(default=60, ge=0)
    max_loss: int = Field(default=30, ge=0)
    low_rank_threshold: float = 2000.0
    gold_threshold: float = 4160.0
    rank_step: float = Field(default=200.0, gt=0)
    rank_step_bonus: float = Field(default=0.10, ge=0)
    max_rank_modifier: float = Field(default=3.5, ge=1.0)
    accuracy_tolerance: float = Field(default=2.5, ge=0)

    @model_validator(mode="after")
    def check_thresholds(self) -> RatingConfig:
        if self.draw_threshold > self.win_threshold:
            msg = "draw_threshold cannot exceed win_threshold"
            raise ValueError(msg)
        return self


class RewardConfig(BaseModel):
    """Currency amounts for reward lines."""

    perfect_bonus: int = Field(default=50, ge=0)
    excellent_bonus: int = Field(default=25, ge=0)
    volume_bonus_high: int = Field(default=20, ge=0)
    volume_bonus_low: int = Field(default=10, ge=0)
    hard_bonus: int = Field(default=15, ge=0)


class StorageConfig(BaseModel):
    """Persistence settings."""

    db_url: str | None = None

    def get_db_url(self) -> str:
        """Get database URL from config or environment."""
        return self.db_url or os.environ.get(DB_URL_ENV_VAR) or DEFAULT_DB_URL


class EngineConfig(BaseModel):
    """Complete engine configuration."""

    rating: RatingConfig = Field(default_factory=RatingConfig)
    rewards: RewardConfig = Field(default_factory=RewardConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(path: str | Path) -> EngineConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated EngineConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file is not a YAML mapping.
        pydantic.ValidationError: If config values are invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data: Any = yaml.safe_load(f)

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top of {config_path}",
            "Use keys such as 'rating', 'rewards' and 'storage'.",
        )

    return EngineConfig.model_validate(data)
