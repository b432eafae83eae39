"""Collection helpers that keep comparisons stable."""

from __future__ import annotations

import copy
import json
from typing import Any, Mapping


def merge_string_maps(
    base: Mapping[str, str] | None,
    overlay: Mapping[str, str] | None,
) -> dict[str, str]:
    """Merge two string maps; keys in *overlay* win. Never returns None."""
    merged = dict(base or {})
    merged.update(overlay or {})
    return merged


def copy_string_map(source: Mapping[str, str] | None) -> dict[str, str]:
    """Copy a string map, turning None into an empty dict."""
    return dict(source or {})


def string_maps_equal(a: Mapping[str, str] | None, b: Mapping[str, str] | None) -> bool:
    """Compare string maps treating None and empty as equal."""
    return dict(a or {}) == dict(b or {})


def is_empty(value: Any) -> bool:
    """Return True for values that mean "absent": None and empty dicts/lists."""
    return value is None or (isinstance(value, (dict, list)) and not value)


def prune_empty(value: Any) -> Any:
    """Recursively drop None values and empty dicts/lists.

    ``0``, ``False`` and ``""`` are kept: they are explicit values.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = prune_empty(item)
            if not is_empty(item):
                pruned[key] = item
        return pruned
    if isinstance(value, list):
        items = [prune_empty(item) for item in value]
        return [item for item in items if item is not None]
    return value


def deep_copy(value: Any) -> Any:
    """Copy a decoded-JSON value without sharing nested containers."""
    return copy.deepcopy(value)


def get_path(obj: Mapping[str, Any] | None, *path: str, default: Any = None) -> Any:
    """Read a nested key, returning *default* when any level is missing or None."""
    current: Any = obj
    for key in path:
        if not isinstance(current, Mapping):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def set_or_remove(target: dict[str, Any], key: str, value: Any) -> None:
    """Set *key* to a copy of *value*, or remove it when *value* means absent."""
    if is_empty(value):
        target.pop(key, None)
    else:
        target[key] = copy.deepcopy(value)


def canonicalize(value: Any) -> Any:
    """Round-trip *value* through JSON.

    Yields plain dicts/lists/scalars regardless of the input's mapping types,
    and makes ``5`` and ``5.0``-style numeric representations compare the way
    the API server will store them.
    """
    if value is None:
        return None
    return json.loads(json.dumps(value, sort_keys=True, default=str))
