"""Boundary checks for session records."""

from __future__ import annotations

import math

from quiz_rating.core.errors import ValidationError
from quiz_rating.ranking.types import SessionPerformance


def normalize_category(category: str) -> str:
    """Normalize a category key, rejecting empty ones."""
    key = category.strip().lower()
    if not key:
        raise ValidationError("category", "must be a non-empty string")
    return key


def validate_session(session: SessionPerformance, accuracy_tolerance: float = 2.5) -> None:
    """Reject malformed sessions before anything is computed.

    Args:
        session: Session record to check.
        accuracy_tolerance: Allowed gap, in percentage points, between a
            reported accuracy and correct/answered.

    Raises:
        ValidationError: On the first problem found.
    """
    normalize_category(session.category)

    if session.questions_answered < 0:
        raise ValidationError("questions_answered", "cannot be negative")
    if session.correct_answers < 0:
        raise ValidationError("correct_answers", "cannot be negative")
    if session.correct_answers > session.questions_answered:
        raise ValidationError(
            "correct_answers",
            f"{session.correct_answers} correct exceeds "
            f"{session.questions_answered} answered",
        )
    if session.win_streak < 0:
        raise ValidationError("win_streak", "cannot be negative")
    if session.loss_streak < 0:
        raise ValidationError("loss_streak", "cannot be negative")
    for name in ("time_spent_seconds", "total_time_budget_seconds"):
        value = getattr(session, name)
        if not math.isfinite(value):
            raise ValidationError(name, "must be a finite number")
        if value < 0:
            raise ValidationError(name, "cannot be negative")
    if not math.isfinite(session.current_rating):
        raise ValidationError("current_rating", "must be a finite number")

    accuracy = session.accuracy_percent
    if accuracy is None:
        return
    if not math.isfinite(accuracy) or not 0 <= accuracy <= 100:
        raise ValidationError("accuracy_percent", f"{accuracy} is outside [0, 100]")

    derived = 0.0
    if session.questions_answered > 0:
        derived = session.correct_answers / session.questions_answered * 100
    if abs(derived - accuracy) > accuracy_tolerance:
        raise ValidationError(
            "accuracy_percent",
            f"{accuracy} disagrees with {session.correct_answers}/"
            f"{session.questions_answered} correct ({derived:.1f})",
        )
