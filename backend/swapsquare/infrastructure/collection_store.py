"""SQL Collection Store: Persistent Store implementation over SQLAlchemy.

Invariants:
    - get() returns a detached copy; mutating it never changes stored state
    - get() of a never-written collection returns its empty default
    - set() replaces the whole collection in one transaction and bumps version
    - Transient failures (connection/operational): retried with exponential backoff
    - Exhausted retries and every other DB failure raise InfrastructureError
    - A failed set() leaves the previous payload intact (transaction rollback)

Design Decisions:
    - Retry lives here, not in services: the "no partial mutation" property is
      per-collection, so retrying one set() is always safe
    - +/-25% jitter on backoff: prevents synchronized retries across workers
"""

import asyncio
import copy
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError

from swapsquare.core.domain_types import Collection
from swapsquare.core.errors import InfrastructureError
from swapsquare.infrastructure.database import DatabaseSessionManager
from swapsquare.models.store_collection import StoreCollection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlCollectionStore:
    """Whole-collection get/set backed by the store_collections table."""

    def __init__(
        self,
        manager: DatabaseSessionManager,
        max_retries: int = 3,
        base_delay_ms: int = 100,
        max_delay_ms: int = 2_000,
    ):
        self._manager = manager
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def get(self, collection: Collection) -> Any:
        """Current snapshot of `collection`."""
        return await self._with_retry(
            "get", collection, lambda: self._read(collection),
        )

    async def set(self, collection: Collection, value: Any) -> None:
        """Replace `collection` with `value` atomically."""
        payload = copy.deepcopy(value)
        await self._with_retry(
            "set", collection, lambda: self._write(collection, payload),
        )

    async def health_check(self) -> bool:
        return await self._manager.health_check()

    async def _read(self, collection: Collection) -> Any:
        async with self._manager.session() as db:
            result = await db.execute(
                select(StoreCollection.payload)
                .where(StoreCollection.name == collection.value),
            )
            payload = result.scalar_one_or_none()
        if payload is None:
            return collection.empty
        return copy.deepcopy(payload)

    async def _write(self, collection: Collection, payload: Any) -> None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(StoreCollection)
                .where(StoreCollection.name == collection.value),
            )
            row = result.scalar_one_or_none()
            if row is None:
                db.add(StoreCollection(
                    name=collection.value, payload=payload, version=1,
                ))
            else:
                row.payload = payload
                row.version = row.version + 1
            await db.commit()

    async def _with_retry(
        self,
        operation: str,
        collection: Collection,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        for attempt in range(self.max_retries + 1):
            try:
                return await call()
            except (OperationalError, DBAPIError) as e:
                if attempt >= self.max_retries:
                    logger.error(
                        f"Store {operation} failed after {attempt + 1} attempts: {e}",
                        extra={"collection": collection.value, "attempt": attempt + 1},
                    )
                    raise InfrastructureError(
                        f"{collection.value} unavailable", f"store {operation}",
                    ) from e
                delay = self._backoff(attempt)
                logger.warning(
                    f"Transient store error, retry after {delay}ms: {e}",
                    extra={"collection": collection.value, "attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
        raise InfrastructureError(
            f"{collection.value} unavailable", f"store {operation}",
        )

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with +/-25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
