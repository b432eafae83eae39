"""Ownership and identity helpers for managed child objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..constants import CONFIG_NAME_SUFFIX, CONTROLLER_ID, LABEL_APP, LABEL_CREATED_BY
from .errors import BuildError

if TYPE_CHECKING:
    from ..models import Phare


def child_name(parent: Phare, suffix: str = "") -> str:
    """Canonical name of a child object: the parent name plus an optional suffix."""
    return f"{parent.name}{suffix}"


def config_map_name(parent: Phare) -> str:
    return child_name(parent, CONFIG_NAME_SUFFIX)


def base_labels(parent: Phare) -> dict[str, str]:
    """Labels every managed child carries."""
    return {
        LABEL_APP: parent.name,
        LABEL_CREATED_BY: CONTROLLER_ID,
    }


def _api_group(api_version: str | None) -> str:
    if not api_version or "/" not in api_version:
        return ""
    return api_version.split("/", 1)[0]


def make_owner_reference(parent: Phare) -> dict[str, Any]:
    """Build the controller owner reference pointing at *parent*."""
    return {
        "apiVersion": parent.api_version,
        "kind": parent.kind,
        "name": parent.name,
        "uid": parent.uid,
        "controller": True,
        "blockOwnerDeletion": True,
    }


def get_controller_reference(obj: dict[str, Any]) -> dict[str, Any] | None:
    """Return the owner reference marked as controller, if any."""
    for ref in (obj.get("metadata") or {}).get("ownerReferences") or []:
        if ref.get("controller"):
            return ref
    return None


def set_controller_reference(obj: dict[str, Any], parent: Phare) -> dict[str, Any]:
    """Stamp *parent* as the controller owner of *obj*.

    Raises:
        BuildError: If the parent has no identity yet, lives in another
            namespace, or *obj* is already controlled by a different owner
    """
    if not parent.name or not parent.uid:
        raise BuildError(f"cannot set owner reference: {parent.kind} has no name/uid")

    metadata = obj.setdefault("metadata", {})
    namespace = metadata.get("namespace")
    if namespace and namespace != parent.namespace:
        raise BuildError(
            f"cross-namespace owner references are not allowed: "
            f"{namespace}/{metadata.get('name')} cannot be owned by {parent.namespace}/{parent.name}"
        )

    existing = get_controller_reference(obj)
    if existing is not None and existing.get("uid") != parent.uid:
        raise BuildError(
            f"object {metadata.get('name')} is already controlled by "
            f"{existing.get('kind')} {existing.get('name')}"
        )

    refs = [ref for ref in metadata.get("ownerReferences") or [] if ref.get("uid") != parent.uid]
    refs.append(make_owner_reference(parent))
    metadata["ownerReferences"] = refs
    return obj


def is_controlled_by(obj: dict[str, Any] | None, parent: Phare) -> bool:
    """Return True if *obj*'s controller owner reference points at *parent*.

    Identity is the UID plus API group and kind; the version is not compared.
    """
    if obj is None:
        return False
    ref = get_controller_reference(obj)
    if ref is None:
        return False
    return (
        ref.get("uid") == parent.uid
        and ref.get("kind") == parent.kind
        and _api_group(ref.get("apiVersion")) == _api_group(parent.api_version)
    )
