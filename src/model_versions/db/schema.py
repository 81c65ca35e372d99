"""DDL for the versions table."""

import re

from model_versions.db.backend import Database

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def validate_table_name(table_name: str) -> str:
    """Return the table name if it is a plain SQL identifier, else raise ValueError.

    Table names are interpolated into DDL and queries, so only
    ``[A-Za-z_][A-Za-z0-9_]*`` is accepted.
    """
    if not _IDENTIFIER_RE.match(table_name):
        raise ValueError(f"Invalid versions table name: {table_name!r}")
    return table_name


def versions_table_sql(table_name: str) -> str:
    """DDL for the versions table and its indexes."""
    table = validate_table_name(table_name)
    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    versionable_type TEXT NOT NULL,
    versionable_id TEXT NOT NULL,
    version_number INTEGER NOT NULL CHECK (version_number >= 1),
    data TEXT NOT NULL DEFAULT '{{}}',
    created_by TEXT,
    comment TEXT,
    created_at TEXT NOT NULL,
    UNIQUE(versionable_type, versionable_id, version_number)
);

CREATE INDEX IF NOT EXISTS idx_{table}_versionable
    ON {table}(versionable_type, versionable_id);
CREATE INDEX IF NOT EXISTS idx_{table}_created_by ON {table}(created_by);
"""


async def apply_schema(db: Database, *, table_name: str = "versions") -> None:
    """Create the versions table and its indexes if they do not exist."""
    await db.executescript(versions_table_sql(table_name))
    await db.commit()


async def drop_schema(db: Database, *, table_name: str = "versions") -> None:
    """Drop the versions table. All history in it is lost."""
    table = validate_table_name(table_name)
    await db.execute(f"DROP TABLE IF EXISTS {table}")
    await db.commit()
