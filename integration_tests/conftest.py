"""Pytest configuration for integration tests.

Integration tests run the storage layer against a real PostgreSQL server and
require POSTGRES_URL_INTEGRATION to point at a disposable database.
"""

import os
import sys
import warnings
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

# Ignore warnings from app.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="app.shared.*")

# Ensure the project root is on sys.path so `app` packages resolve
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from app.domain.live.storage import Storage  # noqa: E402
from app.schemas import Base, init_schema  # noqa: E402
from app.shared.storage.database import DatabaseManager, get_database_manager  # noqa: E402

INTEGRATION_LABEL = "integration"


@pytest.fixture(scope="session")
def postgres_url() -> str:
    url = os.environ.get("POSTGRES_URL_INTEGRATION")
    if not url:
        pytest.skip("POSTGRES_URL_INTEGRATION environment variable required")
    return url


@pytest_asyncio.fixture
async def pg_database(postgres_url: str) -> AsyncGenerator[DatabaseManager]:
    """Fresh tables on the integration database; dropped again afterwards."""
    db = get_database_manager()
    previous = db.register(INTEGRATION_LABEL, postgres_url)
    if previous is not None:
        await previous.dispose()

    engine = db.get_engine(INTEGRATION_LABEL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    assert await init_schema(INTEGRATION_LABEL)

    yield db

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await db.close_engine(INTEGRATION_LABEL)


@pytest.fixture
def pg_storage(pg_database: DatabaseManager) -> Storage:
    return Storage(label=INTEGRATION_LABEL, db=pg_database)
