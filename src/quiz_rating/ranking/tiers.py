"""League-style rank tiers for ratings."""

from __future__ import annotations

from dataclasses import dataclass

DIVISION_SIZE = 200
_DIVISIONS = ("IV", "III", "II", "I")
_DIVISION_TIERS = (
    (
        "Iron",
        (
            "Starting your journey",
            "Learning the basics",
            "Building foundations",
            "Ready to advance",
        ),
    ),
    ("Bronze", ("Bronze foundations", "Steady progress", "Improving skills", "Bronze mastery")),
    ("Silver", ("Silver precision", "Refined technique", "Silver excellence", "Silver mastery")),
    ("Gold", ("Golden potential", "Gold standard", "Gold excellence", "Gold mastery")),
    (
        "Platinum",
        ("Platinum precision", "Platinum skill", "Platinum excellence", "Platinum mastery"),
    ),
    (
        "Diamond",
        ("Diamond brilliance", "Diamond expertise", "Diamond excellence", "Diamond mastery"),
    ),
)


@dataclass(frozen=True)
class RankTier:
    """A named rating band.

    Attributes:
        tier: Tier name (e.g. "Gold").
        division: Division within the tier ("IV" lowest to "I"), empty for
            the apex tiers.
        min_rating: Inclusive lower bound.
        max_rating: Inclusive upper bound.
        description: Short flavour text.
    """

    tier: str
    division: str
    min_rating: int
    max_rating: int
    description: str

    @property
    def name(self) -> str:
        return f"{self.tier} {self.division}".strip()

    @property
    def span(self) -> int:
        return self.max_rating - self.min_rating


def _build_tiers() -> tuple[RankTier, ...]:
    tiers: list[RankTier] = []
    floor = 0
    for tier, descriptions in _DIVISION_TIERS:
        # Iron IV covers 0-399, every other division is one step wide
        for division, description in zip(_DIVISIONS, descriptions, strict=True):
            width = 2 * DIVISION_SIZE if floor == 0 else DIVISION_SIZE
            tiers.append(RankTier(tier, division, floor, floor + width - 1, description))
            floor += width
    tiers.append(RankTier("Master", "", 5000, 5999, "Master level"))
    tiers.append(RankTier("Grandmaster", "", 6000, 6999, "Grandmaster elite"))
    tiers.append(RankTier("Challenger", "", 7000, 9999, "Challenger legend"))
    return tuple(tiers)


RANK_TIERS: tuple[RankTier, ...] = _build_tiers()


@dataclass(frozen=True)
class RankProgress:
    """Position of a rating inside its tier.

    Attributes:
        rank: Current tier.
        league_points: Position inside the tier scaled to 0-100.
        lp_change: A rating change expressed in league points.
        next_rank: Next tier up, None at the top.
        progress_to_next: Percent of the way to ``next_rank`` (0-100).
    """

    rank: RankTier
    league_points: int
    lp_change: int
    next_rank: RankTier | None
    progress_to_next: float


def get_rank(rating: float) -> RankTier:
    """Get the rank tier for a rating.

    Ratings below zero fall back to the lowest tier; ratings above the
    last band stay in the top tier.
    """
    if rating < RANK_TIERS[0].min_rating:
        return RANK_TIERS[0]
    for tier in RANK_TIERS:
        if rating < tier.max_rating + 1:
            return tier
    return RANK_TIERS[-1]


def get_next_rank(rating: float) -> RankTier | None:
    """The tier above the one a rating sits in, None at the top."""
    current = get_rank(rating)
    return next((tier for tier in RANK_TIERS if tier.min_rating > current.min_rating), None)


def rank_progress(rating: float, change: int = 0) -> RankProgress:
    """Describe where a rating sits inside its tier.

    Args:
        rating: Current rating.
        change: Most recent rating change, converted to league points.

    Returns:
        RankProgress for the rating.
    """
    rank = get_rank(rating)
    next_rank = get_next_rank(rating)

    league_points = round((rating - rank.min_rating) / rank.span * 100)
    lp_change = round(change / rank.span * 100)
    if next_rank is None:
        progress = 100.0
    else:
        progress = (rating - rank.min_rating) / (next_rank.min_rating - rank.min_rating) * 100

    return RankProgress(
        rank=rank,
        league_points=max(0, min(100, league_points)),
        lp_change=lp_change,
        next_rank=next_rank,
        progress_to_next=max(0.0, min(100.0, progress)),
    )
