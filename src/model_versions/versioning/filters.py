"""Attribute selection for snapshots and change detection on update."""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from model_versions.models.rules import VersionableRuleSet


def versionable_keys(keys: Iterable[str], rules: VersionableRuleSet) -> set[str]:
    """Select the keys that may be versioned under the given rules.

    Default exclusions go first, then the whitelist (if any) intersects,
    then the blacklist (if any) subtracts. Unknown names in either list
    have no effect.
    """
    selected = set(keys) - rules.default_excluded
    if rules.versionable is not None:
        selected &= rules.versionable
    if rules.non_versionable is not None:
        selected -= rules.non_versionable
    return selected


def filter_versionable_attributes(
    fields: Mapping[str, Any], rules: VersionableRuleSet
) -> dict[str, Any]:
    """Return a deep copy of the versionable subset of ``fields``.

    The copy keeps a captured payload independent of the live entity.
    """
    keys = versionable_keys(fields.keys(), rules)
    return {name: copy.deepcopy(value) for name, value in fields.items() if name in keys}


def has_versionable_change(changed_fields: Iterable[str], rules: VersionableRuleSet) -> bool:
    """True if any of the changed field names is versionable."""
    changed = set(changed_fields)
    if not changed:
        return False
    return bool(versionable_keys(changed, rules))
