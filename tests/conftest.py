import pytest
import pytest_asyncio

from application.services.rate_reader import CachedRateReader
from infrastructure.cache import InMemoryRateCache
from infrastructure.persistence.database import Database


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'rates.db'}")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def reader(database):
    return CachedRateReader.with_caches(database, InMemoryRateCache)
