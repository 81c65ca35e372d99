"""Version history storage on PostgreSQL via asyncpg (``postgres`` extra).

Snapshot queries use ``?`` placeholders, rewritten to ``$N`` per statement.
Each statement runs on its own pooled connection, so concurrent appends
from several processes meet at the UNIQUE constraint, which surfaces as
``UniqueViolationError``.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from model_versions.db.backend import UniqueViolationError
from model_versions.db.schema import validate_table_name

if TYPE_CHECKING:
    import asyncpg

    from model_versions.db.backend import Cursor, Row

logger = logging.getLogger(__name__)

# Pre-compiled regex for placeholder translation
_PLACEHOLDER_RE = re.compile(r"\?")


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``$1, $2, ...`` for asyncpg."""
    counter = 0

    def _replace(_match: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"${counter}"

    return _PLACEHOLDER_RE.sub(_replace, sql)


class PostgresRow:
    """Wraps asyncpg.Record to satisfy the Row protocol."""

    def __init__(self, record: asyncpg.Record) -> None:
        """Initialize with an asyncpg Record."""
        self._record = record

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        return self._record[key]

    def keys(self) -> list[str]:
        """Return column names."""
        return list(self._record.keys())


class PostgresCursor:
    """Wraps a list of asyncpg.Record as a Cursor.

    asyncpg fetches snapshot rows eagerly; this walks the fetched list.
    """

    def __init__(self, rows: list[asyncpg.Record], status: str | None = None) -> None:
        """Initialize with result rows and optional status string."""
        self._rows = rows
        self._index = 0
        self._rowcount = self._parse_rowcount(status)

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        return self._rowcount

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self._index >= len(self._rows):
            return None
        row = PostgresRow(self._rows[self._index])
        self._index += 1
        return row

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        remaining: list[Row] = [PostgresRow(r) for r in self._rows[self._index :]]
        self._index = len(self._rows)
        return remaining

    @staticmethod
    def _parse_rowcount(status: str | None) -> int:
        """Parse affected row count from asyncpg status string.

        Examples: "INSERT 0 1" → 1, "UPDATE 3" → 3, "DELETE 0" → 0.
        """
        if not status:
            return -1
        parts = status.split()
        if len(parts) >= 2:
            try:
                return int(parts[-1])
            except ValueError:
                pass
        return -1


class PostgresBackend:
    """PostgreSQL backend for the versions table.

    Every statement borrows a pool connection and auto-commits, so
    ``commit()`` has nothing to do and an appended snapshot is visible to
    other processes as soon as ``execute()`` returns.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Initialize with an asyncpg connection pool."""
        self._pool = pool

    @classmethod
    async def create(cls, url: str) -> PostgresBackend:
        """Create a PostgresBackend from a connection URL."""
        import asyncpg as _asyncpg

        pool = await _asyncpg.create_pool(url, min_size=2, max_size=10)
        return cls(pool)

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        import asyncpg as _asyncpg

        pg_sql = _translate_placeholders(sql)
        async with self._pool.acquire() as conn:
            # asyncpg.fetch returns list of Records for SELECT
            # asyncpg.execute returns status string for INSERT/UPDATE/DELETE
            try:
                stmt = await conn.prepare(pg_sql)
                if stmt.get_attributes():
                    # Query returns rows
                    rows = await conn.fetch(pg_sql, *params)
                    return PostgresCursor(rows)
                # INSERT/DDL: status string only
                status = await conn.execute(pg_sql, *params)
                return PostgresCursor([], status=status)
            except _asyncpg.UniqueViolationError as exc:
                raise UniqueViolationError(str(exc)) from exc

    async def executemany(self, sql: str, params_seq: list[tuple[Any, ...] | list[Any]]) -> None:
        """Execute a SQL statement for each set of parameters."""
        import asyncpg as _asyncpg

        pg_sql = _translate_placeholders(sql)
        async with self._pool.acquire() as conn:
            try:
                await conn.executemany(pg_sql, params_seq)
            except _asyncpg.UniqueViolationError as exc:
                raise UniqueViolationError(str(exc)) from exc

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements."""
        async with self._pool.acquire() as conn:
            await conn.execute(sql)

    async def commit(self) -> None:
        """Nothing to commit; asyncpg auto-commits each statement."""

    async def close(self) -> None:
        """Close the connection pool."""
        await self._pool.close()

    # -- Schema --

    async def apply_schema(self, *, table_name: str = "versions") -> None:
        """Create the versions table and its indexes if they do not exist."""
        table = validate_table_name(table_name)
        async with self._pool.acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id BIGSERIAL PRIMARY KEY,
                    versionable_type TEXT NOT NULL,
                    versionable_id TEXT NOT NULL,
                    version_number INTEGER NOT NULL CHECK (version_number >= 1),
                    data TEXT NOT NULL DEFAULT '{{}}',
                    created_by TEXT,
                    comment TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE(versionable_type, versionable_id, version_number)
                )
            """)

            # Indexes
            for idx_sql in [
                f"CREATE INDEX IF NOT EXISTS idx_{table}_versionable"
                f" ON {table}(versionable_type, versionable_id)",
                f"CREATE INDEX IF NOT EXISTS idx_{table}_created_by ON {table}(created_by)",
            ]:
                await conn.execute(idx_sql)
        logger.debug("Applied PostgreSQL schema for table %s", table)
