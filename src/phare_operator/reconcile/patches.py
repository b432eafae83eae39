"""JSON merge patch (RFC 7386) generation."""

from __future__ import annotations

import copy
from typing import Any

_MISSING = object()


def create_merge_patch(original: dict[str, Any], modified: dict[str, Any]) -> dict[str, Any]:
    """Return the merge patch that turns *original* into *modified*.

    Nested dicts are diffed recursively, keys missing from *modified* become
    ``None`` (delete), and lists or scalars that differ are replaced whole.
    An empty result means no change.
    """
    patch: dict[str, Any] = {}
    for key in original:
        if key not in modified:
            patch[key] = None
    for key, new in modified.items():
        old = original.get(key, _MISSING)
        if isinstance(old, dict) and isinstance(new, dict):
            nested = create_merge_patch(old, new)
            if nested:
                patch[key] = nested
        elif old is _MISSING or old != new:
            patch[key] = copy.deepcopy(new)
    return patch


def with_resource_version(patch: dict[str, Any], observed: dict[str, Any]) -> dict[str, Any]:
    """Add the observed resourceVersion to *patch* so a concurrent write fails with 409."""
    resource_version = (observed.get("metadata") or {}).get("resourceVersion")
    if resource_version:
        patch.setdefault("metadata", {})["resourceVersion"] = resource_version
    return patch

