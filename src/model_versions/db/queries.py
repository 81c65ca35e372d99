"""Query helpers for the versions table.

Every helper takes the (already validated) versions table name so that
applications can keep history in a table of their choosing.
"""

import json
from datetime import UTC, datetime

from model_versions.db.backend import Database, Row
from model_versions.models.snapshot import Snapshot

_COLUMNS = (
    "versionable_type, versionable_id, version_number, data, created_by, comment, created_at"
)


def row_to_snapshot(row: Row) -> Snapshot:
    """Convert a database row to a Snapshot."""
    return Snapshot(
        entity_type=row["versionable_type"],
        entity_id=row["versionable_id"],
        version_number=row["version_number"],
        data=json.loads(row["data"]),
        created_by=row["created_by"],
        comment=row["comment"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


async def insert_snapshot(db: Database, table: str, snapshot: Snapshot) -> None:
    """Insert a snapshot row and commit.

    Raises UniqueViolationError if the version number is already taken.
    """
    await db.execute(
        f"INSERT INTO {table} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",  # noqa: S608
        (
            snapshot.entity_type,
            snapshot.entity_id,
            snapshot.version_number,
            json.dumps(snapshot.data),
            snapshot.created_by,
            snapshot.comment,
            snapshot.created_at.isoformat(),
        ),
    )
    await db.commit()


async def select_snapshot(
    db: Database, table: str, entity_type: str, entity_id: str, version_number: int
) -> Snapshot | None:
    """Get a single snapshot by its version number."""
    cursor = await db.execute(
        f"SELECT {_COLUMNS} FROM {table}"  # noqa: S608
        " WHERE versionable_type = ? AND versionable_id = ? AND version_number = ?",
        (entity_type, entity_id, version_number),
    )
    row = await cursor.fetchone()
    return row_to_snapshot(row) if row else None


async def select_latest_snapshot(
    db: Database, table: str, entity_type: str, entity_id: str
) -> Snapshot | None:
    """Get the snapshot with the highest version number."""
    cursor = await db.execute(
        f"SELECT {_COLUMNS} FROM {table}"  # noqa: S608
        " WHERE versionable_type = ? AND versionable_id = ?"
        " ORDER BY version_number DESC LIMIT 1",
        (entity_type, entity_id),
    )
    row = await cursor.fetchone()
    return row_to_snapshot(row) if row else None


async def select_snapshots(
    db: Database, table: str, entity_type: str, entity_id: str, *, descending: bool = True
) -> list[Snapshot]:
    """Get all snapshots of an entity ordered by version number."""
    order = "DESC" if descending else "ASC"
    cursor = await db.execute(
        f"SELECT {_COLUMNS} FROM {table}"  # noqa: S608
        " WHERE versionable_type = ? AND versionable_id = ?"
        f" ORDER BY version_number {order}",
        (entity_type, entity_id),
    )
    return [row_to_snapshot(row) for row in await cursor.fetchall()]


async def select_max_version_number(
    db: Database, table: str, entity_type: str, entity_id: str
) -> int:
    """Highest version number recorded for an entity, or 0."""
    cursor = await db.execute(
        f"SELECT COALESCE(MAX(version_number), 0) AS max_version FROM {table}"  # noqa: S608
        " WHERE versionable_type = ? AND versionable_id = ?",
        (entity_type, entity_id),
    )
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("MAX query returned no rows")
    return int(row["max_version"])


async def count_snapshots(db: Database, table: str, entity_type: str, entity_id: str) -> int:
    """Number of snapshots recorded for an entity."""
    cursor = await db.execute(
        f"SELECT COUNT(*) AS cnt FROM {table}"  # noqa: S608
        " WHERE versionable_type = ? AND versionable_id = ?",
        (entity_type, entity_id),
    )
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("COUNT query returned no rows")
    return int(row["cnt"])


def now_utc() -> datetime:
    """Current UTC time, used for snapshot timestamps."""
    return datetime.now(UTC)
