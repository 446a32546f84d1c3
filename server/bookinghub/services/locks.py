"""Per-property serialisation for check-and-insert sequences."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class KeyedLocks:
    """
    One ``asyncio.Lock`` per key, created on demand.

    A lock is dropped once nobody holds or waits for it, so the registry only
    grows with the number of keys in flight.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


async def advisory_xact_lock(db: AsyncSession, key: str) -> None:
    """
    Take a PostgreSQL transaction-scoped advisory lock on ``key``.

    The lock is released when the session's transaction ends. Other
    databases (SQLite in tests) have no equivalent, so this is a no-op there
    and the in-process lock alone applies.
    """
    if db.bind is None or db.bind.dialect.name != "postgresql":
        return

    await db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
    logger.debug("Acquired advisory lock", extra={"lock_key": key})


# Shared by every request in this process
property_locks = KeyedLocks()
