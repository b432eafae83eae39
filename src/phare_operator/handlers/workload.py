"""Deployment/StatefulSet handler."""

from __future__ import annotations

from typing import Any

from ..builders.workload import build_workload
from ..models import Phare, WorkloadKind
from ..reconcile.cleanup import cleanup
from ..reconcile.drift import workload_differs
from ..reconcile.merge import MergeResult, merge_workload
from ..services.kube.base import DEPLOYMENT, STATEFUL_SET, ResourceKind
from .base import ChildHandler

WORKLOAD_KINDS = {
    WorkloadKind.DEPLOYMENT: DEPLOYMENT,
    WorkloadKind.STATEFUL_SET: STATEFUL_SET,
}


class WorkloadHandler(ChildHandler):
    """Runs the Phare as the workload kind it asks for.

    A workload of the other kind owned by the same Phare is removed first, so
    switching ``microservice.kind`` is a cutover rather than a second copy.
    """

    kind = DEPLOYMENT

    def resource_kind(self, parent: Phare) -> ResourceKind:
        return WORKLOAD_KINDS[parent.workload_kind]

    def requested(self, parent: Phare) -> bool:
        return True

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_workload(parent)

    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        return merge_workload(observed, desired)

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        return workload_differs(observed, desired)

    def reconcile(self, parent: Phare) -> None:
        stale = WORKLOAD_KINDS[parent.workload_kind.other]
        cleanup(self.store, stale, self.name(parent), parent, self.events)
        super().reconcile(parent)
