"""Database connection and schema management."""

from model_versions.db.backend import Cursor, Database, Row, UniqueViolationError
from model_versions.db.postgres_backend import PostgresBackend
from model_versions.db.sqlite_backend import SQLiteBackend

__all__ = ["Cursor", "Database", "PostgresBackend", "Row", "SQLiteBackend", "UniqueViolationError"]
