"""Append-only snapshot repository."""

import logging

from model_versions.db.backend import Database, UniqueViolationError
from model_versions.db.queries import (
    count_snapshots,
    insert_snapshot,
    select_latest_snapshot,
    select_max_version_number,
    select_snapshot,
    select_snapshots,
)
from model_versions.db.schema import validate_table_name
from model_versions.errors import VersionConflictError
from model_versions.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class VersionStore:
    """Append-only access to entity version history.

    Snapshots are inserted and read, never updated or deleted. Each append
    is committed before it returns, so ``current`` and ``get`` see it
    immediately afterwards.
    """

    def __init__(self, db: Database, table_name: str = "versions"):
        """Initialize with a database connection and versions table name."""
        self.db = db
        self.table_name = validate_table_name(table_name)

    async def append(self, snapshot: Snapshot) -> Snapshot:
        """Persist a new snapshot.

        Raises VersionConflictError if that version number already exists
        for the entity. Retrying is the allocator's job, not the store's.
        """
        try:
            await insert_snapshot(self.db, self.table_name, snapshot)
        except UniqueViolationError as exc:
            raise VersionConflictError(
                snapshot.entity_type, snapshot.entity_id, snapshot.version_number
            ) from exc
        return snapshot

    async def get(self, entity_type: str, entity_id: str, version_number: int) -> Snapshot | None:
        """Get a specific version of an entity."""
        return await select_snapshot(
            self.db, self.table_name, entity_type, entity_id, version_number
        )

    async def current(self, entity_type: str, entity_id: str) -> Snapshot | None:
        """Get the latest version of an entity."""
        return await select_latest_snapshot(self.db, self.table_name, entity_type, entity_id)

    async def list_descending(self, entity_type: str, entity_id: str) -> list[Snapshot]:
        """Get all versions of an entity, newest first."""
        return await select_snapshots(self.db, self.table_name, entity_type, entity_id)

    async def list_ascending(self, entity_type: str, entity_id: str) -> list[Snapshot]:
        """Get all versions of an entity, oldest first."""
        return await select_snapshots(
            self.db, self.table_name, entity_type, entity_id, descending=False
        )

    async def max_version_number(self, entity_type: str, entity_id: str) -> int:
        """Highest recorded version number, 0 when there is no history."""
        return await select_max_version_number(self.db, self.table_name, entity_type, entity_id)

    async def count(self, entity_type: str, entity_id: str) -> int:
        """Number of versions recorded for an entity."""
        return await count_snapshots(self.db, self.table_name, entity_type, entity_id)
