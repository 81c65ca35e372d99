"""Append-only version history for mutable entities."""

from model_versions.config import VersioningConfig
from model_versions.errors import AllocationConflictError, VersionConflictError, VersioningError
from model_versions.models.rules import VersionableRuleSet
from model_versions.models.snapshot import Snapshot
from model_versions.store.allocator import VersionNumberAllocator
from model_versions.store.version_store import VersionStore
from model_versions.versioning import (
    EntityPersister,
    ModelEntity,
    Versionable,
    VersioningController,
    VersioningGate,
)

__all__ = [
    "AllocationConflictError",
    "EntityPersister",
    "ModelEntity",
    "Snapshot",
    "VersionConflictError",
    "VersionNumberAllocator",
    "VersionStore",
    "Versionable",
    "VersionableRuleSet",
    "VersioningConfig",
    "VersioningController",
    "VersioningError",
    "VersioningGate",
]
