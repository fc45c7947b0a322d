from .currency import CoinTransaction
from .rating import CategoryRatingRecord, RatingHistoryEntry

__all__ = ["CategoryRatingRecord", "CoinTransaction", "RatingHistoryEntry"]
