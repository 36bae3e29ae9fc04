# onboarding/db/init_db.py
"""Database initialization utilities."""
import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

import onboarding.models  # noqa: F401  registers every table on Base.metadata
from onboarding.models.base import Base

logger = logging.getLogger(__name__)


def _resolve(bind: Optional[Engine]) -> Engine:
    if bind is not None:
        return bind
    from onboarding.db.session import engine
    return engine


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; production deployments manage
    the schema with migrations.
    """
    bind = _resolve(bind)
    existing_tables = set(inspect(bind).get_table_names())
    missing = [t for t in Base.metadata.sorted_tables if t.name not in existing_tables]

    if not missing:
        logger.info(f"Database already initialized with {len(existing_tables)} tables")
        return

    Base.metadata.create_all(bind=bind, tables=missing)
    logger.info(f"Created {len(missing)} database tables")


def drop_db(bind: Optional[Engine] = None) -> None:
    """Drop all tables. Deletes all data."""
    Base.metadata.drop_all(bind=_resolve(bind))
    logger.warning("All database tables dropped")


def reset_db(bind: Optional[Engine] = None) -> None:
    """Drop and recreate all tables. Deletes all data."""
    logger.warning("Resetting database...")
    drop_db(bind)
    init_db(bind)
    logger.info("Database reset complete")
