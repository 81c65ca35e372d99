"""Exceptions raised by the versioning core.

Missing versions are not errors: lookups return ``None`` and restores
return ``False``. Storage failures propagate from the database driver
unchanged.
"""

from __future__ import annotations


class VersioningError(Exception):
    """Base class for versioning errors."""


class VersionConflictError(VersioningError):
    """A snapshot with the same (entity type, entity id, version number) exists."""

    def __init__(self, entity_type: str, entity_id: str, version_number: int) -> None:
        """Record which snapshot collided."""
        super().__init__(
            f"Version {version_number} of {entity_type}:{entity_id} already exists"
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.version_number = version_number


class AllocationConflictError(VersioningError):
    """Version number allocation kept conflicting until the retry budget ran out."""

    def __init__(self, entity_type: str, entity_id: str, attempts: int) -> None:
        """Record the contended entity and how many attempts were made."""
        super().__init__(
            f"Could not allocate a version number for {entity_type}:{entity_id}"
            f" after {attempts} attempts"
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.attempts = attempts
