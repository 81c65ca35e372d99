"""Version number allocation that is safe under concurrent appends."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from model_versions.errors import AllocationConflictError, VersionConflictError
from model_versions.models.snapshot import Snapshot
from model_versions.store.version_store import VersionStore

logger = logging.getLogger(__name__)


class VersionNumberAllocator:
    """Assigns the next version number and appends the snapshot.

    Reading the current maximum and inserting max + 1 is racy on its own:
    two callers can read the same maximum. Two layers close the race:

    1. Per-entity ``asyncio.Lock``: callers in this process that allocate
       for the same (type, id) take turns, so they never collide with each
       other. Different entities proceed in parallel. A lock is dropped
       once nobody holds or waits for it.
    2. The UNIQUE constraint on (type, id, number): a writer in another
       process (or using another allocator) can still win a number. The
       loser's insert fails and ``allocate`` re-reads the maximum and tries
       again, up to ``max_attempts`` times in total.
    """

    def __init__(
        self,
        store: VersionStore,
        *,
        max_attempts: int = 25,
        retry_delay: float = 0.0,
    ) -> None:
        """Initialize with a version store and a retry budget."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._entity_locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._lock_users: dict[tuple[str, str], int] = {}

    @asynccontextmanager
    async def _entity_lock(self, entity_type: str, entity_id: str) -> AsyncIterator[None]:
        key = (entity_type, entity_id)
        lock = self._entity_locks.get(key)
        if lock is None:
            lock = self._entity_locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._entity_locks[key]

    async def next_number(self, entity_type: str, entity_id: str) -> int:
        """Candidate number for the next snapshot of an entity."""
        return await self.store.max_version_number(entity_type, entity_id) + 1

    async def allocate(
        self,
        entity_type: str,
        entity_id: str,
        build: Callable[[int], Snapshot],
    ) -> Snapshot:
        """Build a snapshot for the next free number and append it.

        ``build`` receives the candidate number and returns the snapshot to
        store; it may be called more than once. Raises
        AllocationConflictError when every attempt hit a conflict.
        """
        async with self._entity_lock(entity_type, entity_id):
            for attempt in range(1, self.max_attempts + 1):
                number = await self.next_number(entity_type, entity_id)
                try:
                    return await self.store.append(build(number))
                except VersionConflictError:
                    logger.debug(
                        "Version %d of %s:%s taken (attempt %d/%d), retrying",
                        number,
                        entity_type,
                        entity_id,
                        attempt,
                        self.max_attempts,
                    )
                    if attempt < self.max_attempts:
                        await asyncio.sleep(self.retry_delay * attempt)

        logger.warning(
            "Gave up allocating a version for %s:%s after %d attempts",
            entity_type,
            entity_id,
            self.max_attempts,
        )
        raise AllocationConflictError(entity_type, entity_id, self.max_attempts)
