"""Quiz Rating Engine.

Turn completed quiz sessions into per-category skill ratings,
win/draw/loss outcomes and coin rewards.
"""

from quiz_rating.ranking import (
    CompetitiveRatingEngine,
    SessionPerformance,
    create_rating_engine,
)

__version__ = "0.1.0"
__all__ = [
    "CompetitiveRatingEngine",
    "SessionPerformance",
    "__version__",
    "create_rating_engine",
]
