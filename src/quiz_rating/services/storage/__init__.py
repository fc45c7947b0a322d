import structlog

from .base import CategoryStats, CurrencyLedger, HistoryRecord, RatingStore
from .db_store import DBCurrencyLedger, DBRatingStore
from .memory_store import InMemoryCurrencyLedger, InMemoryRatingStore
from .repository import create_db_engine

logger = structlog.get_logger()


def create_stores(
    db_url: str | None = None, dry_run: bool = False
) -> tuple[RatingStore, CurrencyLedger]:
    """Create the rating store and currency ledger.

    Args:
        db_url: SQLAlchemy database URL (required unless dry_run).
        dry_run: Use in-memory stores that are discarded on exit.

    Returns:
        Tuple of (rating store, currency ledger).
    """
    if dry_run:
        logger.info("store_init", backend="memory")
        return InMemoryRatingStore(), InMemoryCurrencyLedger()

    if not db_url:
        msg = "Database URL required unless running dry"
        raise ValueError(msg)

    engine = create_db_engine(db_url)
    logger.info("store_init", backend=engine.dialect.name, db_url=engine.url.render_as_string())
    return DBRatingStore(engine), DBCurrencyLedger(engine)


__all__ = [
    "CategoryStats",
    "CurrencyLedger",
    "DBCurrencyLedger",
    "DBRatingStore",
    "HistoryRecord",
    "InMemoryCurrencyLedger",
    "InMemoryRatingStore",
    "RatingStore",
    "create_db_engine",
    "create_stores",
]
