"""Storage protocols the version history is written through.

The query helpers and ``VersionStore`` only see ``Database``, ``Cursor`` and
``Row``. A backend hides its driver: it translates placeholders if it has
to, and turns the driver's duplicate-key error into ``UniqueViolationError``
so a lost version number race looks the same on every database.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class UniqueViolationError(Exception):
    """An INSERT or UPDATE violated a UNIQUE constraint.

    Backends raise this from the driver's own exception so callers can
    detect duplicates without importing sqlite3 or asyncpg.
    """


@runtime_checkable
class Row(Protocol):
    """A database row supporting both named and positional access."""

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        ...

    def keys(self) -> Any:
        """Return column names."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Async cursor returned by Database.execute()."""

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        ...

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async database backend.

    Snapshot queries use ``?`` placeholders and SQLite syntax. Inserting a
    duplicate (type, id, number) raises ``UniqueViolationError``.
    """

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        ...

    async def executemany(self, sql: str, params_seq: list[tuple[Any, ...] | list[Any]]) -> None:
        """Execute a SQL statement for each set of parameters."""
        ...

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements (versions DDL)."""
        ...

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def close(self) -> None:
        """Close the database connection."""
        ...
