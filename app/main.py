import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger

from app.app_config import get_app_environ_config
from app.domain.live.storage import Storage, get_storage
from app.schemas import init_schema
from app.shared.logger import init_logger
from app.shared.storage.database import get_database_manager


@asynccontextmanager
async def lifespan(label: str | None = None) -> AsyncIterator[Storage]:
    init_logger()

    label = label or get_app_environ_config().DB_LABEL
    logger.info("Storage startup...")

    db = get_database_manager()
    for name, info in db.get_connection_info().items():
        logger.info("Database '{}': {}", name, info['safe_url'])

    # A failed sync is logged and does not abort startup
    await init_schema(label)

    try:
        yield get_storage(label, db)
    finally:
        logger.info("Storage shutdown...")
        await db.close_all()


async def bootstrap() -> bool:
    """Synchronize the tables once and release the engines."""
    init_logger()
    async with get_database_manager():
        return await init_schema(get_app_environ_config().DB_LABEL)


if __name__ == "__main__":
    synced = asyncio.run(bootstrap())
    raise SystemExit(0 if synced else 1)
