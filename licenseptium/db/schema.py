import logging

from sqlalchemy import Engine

from licenseptium.db.base import Base

logger = logging.getLogger(__name__)


def create_tables(engine: Engine) -> None:
    """Create the license tables if they do not exist yet. Safe to call on every start."""
    # Registers the mapped tables on Base.metadata.
    import licenseptium.models  # noqa: F401

    Base.metadata.create_all(engine, checkfirst=True)
    logger.info("Schema ready: %s", ", ".join(sorted(Base.metadata.tables)))
