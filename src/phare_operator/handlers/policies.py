"""Handlers for the GKE policy kinds, reconciled as opaque JSON."""

from __future__ import annotations

from typing import Any

from ..builders.policies import build_gcp_backend_policy, build_health_check_policy
from ..models import Phare
from ..reconcile.drift import unstructured_differs
from ..reconcile.merge import MergeResult, merge_spec_object
from ..services.kube.base import GCP_BACKEND_POLICY, HEALTH_CHECK_POLICY
from .base import ChildHandler


class _PolicyHandler(ChildHandler):
    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        return MergeResult(merge_spec_object(observed, desired))

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        return unstructured_differs(observed, desired)


class GCPBackendPolicyHandler(_PolicyHandler):
    kind = GCP_BACKEND_POLICY

    def requested(self, parent: Phare) -> bool:
        return parent.gcp_backend_policy is not None

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_gcp_backend_policy(parent)


class HealthCheckPolicyHandler(_PolicyHandler):
    kind = HEALTH_CHECK_POLICY

    def requested(self, parent: Phare) -> bool:
        return parent.health_check_policy is not None

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_health_check_policy(parent)
