"""Value types shared by the rating engine components."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from quiz_rating.core.errors import MissingFieldError, ValidationError
from quiz_rating.ranking.tiers import RankTier


class Result(StrEnum):
    """Categorical outcome of a session."""

    WIN = "win"
    DRAW = "draw"
    LOSS = "loss"


class Difficulty(StrEnum):
    """Known difficulty tiers."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: str) -> Difficulty | None:
        """Return the tier for a case-insensitive name, or None if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class RewardKind(StrEnum):
    """Reason codes for currency reward lines."""

    RATING_GAIN = "rating_gain"
    RATING_LOSS = "rating_loss"
    RATING_DRAW = "rating_draw"
    PERFORMANCE_BONUS = "performance_bonus"
    VOLUME_BONUS = "volume_bonus"
    DIFFICULTY_BONUS = "difficulty_bonus"


# camelCase names used by the quiz front end
_FIELD_ALIASES = {
    "accuracyPercent": "accuracy_percent",
    "accuracy": "accuracy_percent",
    "questionsAnswered": "questions_answered",
    "correctAnswers": "correct_answers",
    "timeSpentSeconds": "time_spent_seconds",
    "timeSpent": "time_spent_seconds",
    "totalTimeBudgetSeconds": "total_time_budget_seconds",
    "totalTime": "total_time_budget_seconds",
    "currentRating": "current_rating",
    "currentElo": "current_rating",
    "winStreak": "win_streak",
    "lossStreak": "loss_streak",
}

_INT_FIELDS = ("questions_answered", "correct_answers", "win_streak", "loss_streak")
_FLOAT_FIELDS = (
    "accuracy_percent",
    "time_spent_seconds",
    "total_time_budget_seconds",
    "current_rating",
)


@dataclass(frozen=True)
class SessionPerformance:
    """Telemetry for one completed quiz session.

    Attributes:
        category: Topic key the session was played in.
        difficulty: Difficulty name (easy/medium/hard, others tolerated).
        questions_answered: Non-skipped attempts.
        correct_answers: Correct attempts.
        current_rating: Rating in ``category`` before this session.
        accuracy_percent: Accuracy 0-100; derived from the counts if None.
        time_spent_seconds: Time actually spent.
        total_time_budget_seconds: Time available for the session.
        win_streak: Consecutive prior wins.
        loss_streak: Consecutive prior losses.
    """

    category: str
    difficulty: str
    questions_answered: int
    correct_answers: int
    current_rating: float
    accuracy_percent: float | None = None
    time_spent_seconds: float = 0.0
    total_time_budget_seconds: float = 0.0
    win_streak: int = 0
    loss_streak: int = 0

    @property
    def accuracy(self) -> float:
        """Reported accuracy, or correct/answered as a percentage."""
        if self.accuracy_percent is not None:
            return self.accuracy_percent
        if self.questions_answered == 0:
            return 0.0
        return self.correct_answers / self.questions_answered * 100

    @property
    def difficulty_tier(self) -> Difficulty | None:
        return Difficulty.parse(self.difficulty)

    @property
    def pace_ratio(self) -> float:
        """Fraction of the time budget used (0 when there is no budget)."""
        if self.total_time_budget_seconds <= 0:
            return 0.0
        return self.time_spent_seconds / self.total_time_budget_seconds

    @property
    def seconds_per_question(self) -> float:
        if self.questions_answered == 0:
            return 0.0
        return self.time_spent_seconds / self.questions_answered

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        current_rating: float | None = None,
    ) -> SessionPerformance:
        """Build a session from a loosely-typed mapping.

        Accepts snake_case field names and the front end's camelCase names.
        Unknown keys are ignored.

        Args:
            data: Raw session record.
            current_rating: Rating to use when the record carries none.

        Returns:
            SessionPerformance instance (not yet range-validated).

        Raises:
            MissingFieldError: If a required field is absent.
            ValidationError: If a numeric field cannot be coerced.
        """
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                values[name] = value

        if values.get("current_rating") is None and current_rating is not None:
            values["current_rating"] = current_rating

        for required in (
            "category",
            "difficulty",
            "questions_answered",
            "correct_answers",
            "current_rating",
        ):
            if values.get(required) is None:
                raise MissingFieldError(required)

        values = {name: value for name, value in values.items() if value is not None}
        for name in _INT_FIELDS:
            if name in values:
                values[name] = _coerce(name, values[name], int)
        for name in _FLOAT_FIELDS:
            if name in values:
                values[name] = _coerce(name, values[name], float)

        values["category"] = str(values["category"])
        values["difficulty"] = str(values["difficulty"])
        return cls(**values)


def _coerce(name: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ValidationError(name, f"expected a number, got {value!r}")
    try:
        coerced = kind(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(name, f"expected a number, got {value!r}") from e
    if kind is int and isinstance(value, float) and not value.is_integer():
        raise ValidationError(name, f"expected a whole number, got {value!r}")
    return coerced


@dataclass(frozen=True)
class Outcome:
    """Discrete result and the score it was derived from."""

    result: Result
    performance_score: float


@dataclass(frozen=True)
class ModifierBreakdown:
    """Every factor that went into a rating change."""

    base_change: float
    performance_modifier: float
    difficulty_modifier: float
    rank_modifier: float
    streak_modifier: float

    @property
    def product(self) -> float:
        return (
            self.base_change
            * self.performance_modifier
            * self.difficulty_modifier
            * self.rank_modifier
            * self.streak_modifier
        )


@dataclass(frozen=True)
class RatingDelta:
    """Signed, capped rating change with its full audit trail.

    Attributes:
        elo_change: Capped integer change applied to the rating.
        result: Outcome the change was computed for.
        breakdown: Factors that were multiplied together.
        raw_change: Uncapped, unrounded product of the factors.
    """

    elo_change: int
    result: Result
    breakdown: ModifierBreakdown
    raw_change: float


@dataclass(frozen=True)
class RewardLine:
    """One discrete currency grant."""

    kind: RewardKind
    amount: int
    label: str


@dataclass(frozen=True)
class SessionOutcome:
    """Everything computed from one session, before any side effect."""

    outcome: Outcome
    delta: RatingDelta
    rewards: list[RewardLine]
    description: str = ""
    pace_ratio: float = 0.0

    @property
    def total_reward(self) -> int:
        return sum(line.amount for line in self.rewards)


@dataclass(frozen=True)
class CategoryRating:
    """Snapshot of a player's ratings after a read or write.

    Attributes:
        by_category: Rating for every seeded category.
        overall: Mean of all seeded category ratings.
        category: Category touched by the write, if any.
        previous_rating: Rating before the write.
        new_rating: Rating after the write.
        rank: Rank tier of ``new_rating``.
    """

    by_category: dict[str, float]
    overall: float
    category: str | None = None
    previous_rating: float | None = None
    new_rating: float | None = None
    rank: RankTier | None = None


@dataclass(frozen=True)
class GrantReport:
    """Which reward lines the currency ledger accepted."""

    granted: list[RewardLine] = field(default_factory=list)
    failed: list[RewardLine] = field(default_factory=list)

    @property
    def total_granted(self) -> int:
        return sum(line.amount for line in self.granted)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class SessionResult:
    """Outcome of processing a session end to end."""

    session: SessionPerformance
    outcome: SessionOutcome
    rating: CategoryRating
    grants: GrantReport


class TrendDirection(StrEnum):
    """Direction of recent rating movement."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class PerformanceTrend:
    """Net rating movement over a recent window.

    Attributes:
        direction: Up, down or stable.
        change: Rating moved between the first and last session in the window.
        sessions: Sessions played in the window.
    """

    direction: TrendDirection
    change: float
    sessions: int
