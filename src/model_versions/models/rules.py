"""Per-entity-type rules for which attributes get versioned."""

from pydantic import BaseModel, ConfigDict, Field

from model_versions.config import DEFAULT_NON_VERSIONABLE


class VersionableRuleSet(BaseModel):
    """Which fields of an entity type are captured in snapshots.

    ``default_excluded`` is always removed. ``versionable`` is a whitelist and
    ``non_versionable`` a blacklist; normally only one is set. When both are,
    the whitelist is applied first and the blacklist narrows the result.
    """

    model_config = ConfigDict(frozen=True)

    default_excluded: frozenset[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_NON_VERSIONABLE)
    )
    versionable: frozenset[str] | None = None
    non_versionable: frozenset[str] | None = None
