"""Root conftest: shared configuration and store-backed fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The clock advances by 1000ms per call so ordering never ties
    - Store retries use a 1ms base delay to keep failure tests fast

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the store only needs JSON columns
    - DatabaseSessionManager built via __new__: reuses the test engine without
      re-reading settings
"""

import itertools
import os

# Ensure tests never reach a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from swapsquare.config import Settings  # noqa: E402
from swapsquare.core.entities import ItemDraft  # noqa: E402
from swapsquare.db.base import Base  # noqa: E402
from swapsquare.infrastructure.collection_store import SqlCollectionStore  # noqa: E402
from swapsquare.infrastructure.database import DatabaseSessionManager  # noqa: E402
from swapsquare.infrastructure.identity_provider import LocalIdentityProvider  # noqa: E402
from swapsquare.services.marketplace import Marketplace  # noqa: E402
from tests.factories import FakeUpload  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def test_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
def store(test_manager):
    return SqlCollectionStore(test_manager, max_retries=2, base_delay_ms=1)


@pytest.fixture
def clock():
    ticks = itertools.count(start=1_000, step=1_000)
    return lambda: next(ticks)


@pytest.fixture
def settings():
    return Settings(
        max_live_items_per_owner=3,
        max_images_per_item=3,
        max_image_bytes=1_024,
        default_city="Winnipeg",
    )


@pytest.fixture
def identity():
    return LocalIdentityProvider()


@pytest.fixture
def market(store, identity, settings, clock):
    m = Marketplace(store, identity, settings, clock=clock)
    yield m
    m.close()


@pytest.fixture
def post_item(market):
    """Create an item through the catalog: `await post_item(owner, title=...)`."""
    async def _post(owner_id, title="Desk lamp", city=None, images=None):
        draft = ItemDraft(
            title=title, category="Home", condition="Good",
            description=f"{title} in working order", city=city,
        )
        return await market.catalog.create_item(
            owner_id, draft, images if images is not None else [FakeUpload()],
        )
    return _post
