"""Shared scaffolding for child object builders."""

from __future__ import annotations

from typing import Any

from ..models import Phare
from ..services.kube.base import ResourceKind
from ..utils.maps import merge_string_maps
from ..utils.ownership import base_labels, child_name, set_controller_reference


def new_child(
    kind: ResourceKind,
    parent: Phare,
    name: str | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Return the skeleton of a child object: identity, labels and annotations."""
    metadata: dict[str, Any] = {
        "name": name or child_name(parent),
        "namespace": parent.namespace,
        "labels": merge_string_maps(base_labels(parent), labels),
    }
    if annotations:
        metadata["annotations"] = dict(annotations)
    return {
        "apiVersion": kind.api_version,
        "kind": kind.kind,
        "metadata": metadata,
    }


def owned(obj: dict[str, Any], parent: Phare) -> dict[str, Any]:
    """Stamp the controller owner reference; raises BuildError on failure."""
    return set_controller_reference(obj, parent)
