"""Builders for the GKE networking policy kinds.

These kinds have no client-side schema; their spec is taken from the Phare
as opaque JSON.
"""

from __future__ import annotations

from typing import Any

from ..models import Phare
from ..services.kube.base import GCP_BACKEND_POLICY, HEALTH_CHECK_POLICY, ResourceKind
from ..utils.errors import BuildError
from ..utils.maps import canonicalize
from .base import new_child, owned


def _build_policy(kind: ResourceKind, parent: Phare, requested: dict[str, Any] | None) -> dict[str, Any]:
    if requested is None:
        raise BuildError(f"{parent.namespace}/{parent.name} does not request a {kind.kind}")
    policy = new_child(kind, parent)
    policy["spec"] = canonicalize(requested)
    return owned(policy, parent)


def build_health_check_policy(parent: Phare) -> dict[str, Any]:
    return _build_policy(HEALTH_CHECK_POLICY, parent, parent.health_check_policy)


def build_gcp_backend_policy(parent: Phare) -> dict[str, Any]:
    return _build_policy(GCP_BACKEND_POLICY, parent, parent.gcp_backend_policy)
