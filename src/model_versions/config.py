"""Environment-variable-based configuration."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_NON_VERSIONABLE = ("id", "created_at", "updated_at", "deleted_at")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _get_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def get_db_path() -> Path:
    """Return the SQLite database file path from MODEL_VERSIONS_DB_PATH."""
    raw = os.environ.get("MODEL_VERSIONS_DB_PATH", "~/.local/share/model_versions/versions.db")
    return Path(raw).expanduser()


def get_database_url() -> str | None:
    """Return the database URL from MODEL_VERSIONS_DATABASE_URL, if set."""
    return os.environ.get("MODEL_VERSIONS_DATABASE_URL") or None


def get_table_name() -> str:
    """Return the versions table name from MODEL_VERSIONS_TABLE."""
    return os.environ.get("MODEL_VERSIONS_TABLE", "versions")


def is_auto_version_on_create() -> bool:
    """Return True unless MODEL_VERSIONS_AUTO_CREATE is false."""
    return _get_bool("MODEL_VERSIONS_AUTO_CREATE", True)


def is_auto_version_on_update() -> bool:
    """Return True unless MODEL_VERSIONS_AUTO_UPDATE is false."""
    return _get_bool("MODEL_VERSIONS_AUTO_UPDATE", True)


def is_version_on_restore() -> bool:
    """Return True unless MODEL_VERSIONS_VERSION_ON_RESTORE is false."""
    return _get_bool("MODEL_VERSIONS_VERSION_ON_RESTORE", True)


def get_default_non_versionable() -> frozenset[str]:
    """Return the default excluded attributes from MODEL_VERSIONS_DEFAULT_EXCLUDED."""
    raw = os.environ.get("MODEL_VERSIONS_DEFAULT_EXCLUDED")
    if raw is None:
        return frozenset(DEFAULT_NON_VERSIONABLE)
    return frozenset(name.strip() for name in raw.split(",") if name.strip())


def get_max_attempts() -> int:
    """Return the version number allocation retry budget from MODEL_VERSIONS_MAX_ATTEMPTS."""
    return int(os.environ.get("MODEL_VERSIONS_MAX_ATTEMPTS", "25"))


def get_log_level() -> str:
    """Return the logging level from MODEL_VERSIONS_LOG_LEVEL."""
    return os.environ.get("MODEL_VERSIONS_LOG_LEVEL", "WARNING")


class VersioningConfig(BaseModel):
    """Explicit versioning settings handed to the controller.

    Nothing in the versioning core reads the environment; applications build
    this once (usually via ``from_env``) and pass it in.
    """

    table_name: str = "versions"
    auto_version_on_create: bool = True
    auto_version_on_update: bool = True
    create_version_on_restore: bool = True
    default_non_versionable: frozenset[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_NON_VERSIONABLE)
    )
    max_attempts: int = Field(default=25, ge=1)

    @classmethod
    def from_env(cls) -> "VersioningConfig":
        """Build a config from MODEL_VERSIONS_* environment variables."""
        return cls(
            table_name=get_table_name(),
            auto_version_on_create=is_auto_version_on_create(),
            auto_version_on_update=is_auto_version_on_update(),
            create_version_on_restore=is_version_on_restore(),
            default_non_versionable=get_default_non_versionable(),
            max_attempts=get_max_attempts(),
        )
