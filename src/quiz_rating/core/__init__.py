"""Core configuration and errors for the rating engine."""

from quiz_rating.core.config import (
    DEFAULT_DB_URL,
    EngineConfig,
    RatingConfig,
    RewardConfig,
    StorageConfig,
    load_config,
)
from quiz_rating.core.errors import (
    ConfigurationError,
    MissingFieldError,
    QuizRatingError,
    RatingPersistenceError,
    StorageError,
    ValidationError,
)

__all__ = [
    "DEFAULT_DB_URL",
    "EngineConfig",
    "RatingConfig",
    "RewardConfig",
    "StorageConfig",
    "load_config",
    "ConfigurationError",
    "MissingFieldError",
    "QuizRatingError",
    "RatingPersistenceError",
    "StorageError",
    "ValidationError",
]
