"""Versioning lifecycle, attribute rules and suppression."""

from model_versions.versioning.controller import VersioningController
from model_versions.versioning.entity import EntityPersister, ModelEntity, Versionable
from model_versions.versioning.filters import (
    filter_versionable_attributes,
    has_versionable_change,
    versionable_keys,
)
from model_versions.versioning.gate import VersioningGate

__all__ = [
    "EntityPersister",
    "ModelEntity",
    "Versionable",
    "VersioningController",
    "VersioningGate",
    "filter_versionable_attributes",
    "has_versionable_change",
    "versionable_keys",
]
