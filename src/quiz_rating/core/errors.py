"""Custom exceptions for session validation, configuration, and storage errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quiz_rating.ranking.types import RatingDelta


class QuizRatingError(Exception):
    """Base exception with a category tag and optional suggestion."""

    category = "Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.category}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ConfigurationError(QuizRatingError):
    """Base exception for configuration errors."""

    category = "Configuration Error"


class ValidationError(QuizRatingError):
    """Error when a session record is malformed.

    Raised before any computation happens so upstream tracking bugs surface
    instead of being clamped away.
    """

    category = "Validation Error"

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid value for '{field}': {reason}",
            "Check the session tracker that produced this record.",
        )


class MissingFieldError(ValidationError):
    """Error when a required session field is missing."""

    def __init__(self, field: str, source: str = "session") -> None:
        self.source = source
        super().__init__(field, f"required field missing from {source}")


class StorageError(QuizRatingError):
    """Error when the rating store or currency ledger is unavailable."""

    category = "Storage Error"


class RatingPersistenceError(StorageError):
    """Error when a computed rating change could not be written.

    The computed delta travels with the error so the caller can retry
    persistence without recomputing.
    """

    def __init__(self, category_key: str, delta: RatingDelta, cause: Exception) -> None:
        self.category_key = category_key
        self.delta = delta
        self.cause = cause
        super().__init__(
            f"Could not persist rating change {delta.elo_change:+d} for '{category_key}': {cause}",
            "Retry apply_rating_update with the attached delta.",
        )
