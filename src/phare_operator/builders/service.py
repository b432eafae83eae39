"""Builder for the Phare Service."""

from __future__ import annotations

from typing import Any

from ..constants import ANNOTATION_REALLOCATE_NODE_PORT, LABEL_APP
from ..models import Phare
from ..reconcile.merge import ALLOCATED_SERVICE_FIELDS
from ..services.kube.base import SERVICE
from ..utils.errors import BuildError
from ..utils.maps import deep_copy, is_empty
from .base import new_child, owned

DEFAULT_SERVICE_TYPE = "ClusterIP"

# Keys of spec.service that describe the object metadata rather than its spec.
_METADATA_KEYS = ("labels", "annotations")


def service_annotations(parent: Phare) -> dict[str, str]:
    """``service.annotations`` without the node-port reallocation marker."""
    annotations = dict((parent.service or {}).get("annotations") or {})
    annotations.pop(ANNOTATION_REALLOCATE_NODE_PORT, None)
    return annotations


def build_service(parent: Phare) -> dict[str, Any]:
    """Build the desired Service from ``spec.service``.

    The type defaults to ClusterIP and the selector to ``app=<name>``.
    Platform-allocated fields are left out; a headless request
    (``clusterIP: None``) is kept since it can only be set at creation.

    Raises:
        BuildError: If ``spec.service`` is not set or the owner reference
            cannot be set
    """
    requested = parent.service
    if requested is None:
        raise BuildError(f"{parent.namespace}/{parent.name} does not request a Service")

    spec = {key: deep_copy(value) for key, value in requested.items() if key not in _METADATA_KEYS}
    headless = spec.get("clusterIP") == "None"
    for field_name in ALLOCATED_SERVICE_FIELDS:
        spec.pop(field_name, None)
    if headless:
        spec["clusterIP"] = "None"

    spec = {key: value for key, value in spec.items() if not is_empty(value)}
    if not spec.get("type"):
        spec["type"] = DEFAULT_SERVICE_TYPE
    if not spec.get("selector"):
        spec["selector"] = {LABEL_APP: parent.name}

    service = new_child(
        SERVICE,
        parent,
        labels=requested.get("labels"),
        annotations=service_annotations(parent),
    )
    service["spec"] = spec
    return owned(service, parent)
