"""Structural synchronization of the tables at process start."""

from loguru import logger
from sqlalchemy.exc import DBAPIError

from app.shared.logger import format_error
from app.shared.storage.database import get_database_manager

from .base import Base

# Importing the table modules registers them on Base.metadata
from .comment import Comment  # noqa: F401
from .stream import Stream  # noqa: F401
from .subscription import Subscription  # noqa: F401
from .user import User  # noqa: F401
from .view import View  # noqa: F401

_UNDEFINED_TABLE_SQLSTATE = '42P01'


def _is_missing_table(err: BaseException) -> bool:
    if not isinstance(err, DBAPIError):
        return False
    orig = err.orig
    sqlstate = getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)
    if sqlstate == _UNDEFINED_TABLE_SQLSTATE:
        return True
    return 'no such table' in str(orig).lower()


async def init_schema(label: str | None = None) -> bool:
    """
    Create every table that does not exist yet.

    A missing-table error on the very first sync is expected while the schema
    is still being built. Other failures are logged; neither aborts startup.

    Returns:
        True when the tables are synchronized, False otherwise
    """
    engine = get_database_manager().get_engine(label)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        if _is_missing_table(e):
            logger.info("Building tables")
        else:
            logger.error("An error occurred while synchronizing tables: {}", format_error(e))
        return False

    logger.info("Tables synchronized: {}", sorted(Base.metadata.tables))
    return True


__all__ = ["init_schema"]
