"""Service handler."""

from __future__ import annotations

from typing import Any

from ..builders.service import build_service
from ..models import Phare
from ..reconcile.drift import service_differs
from ..reconcile.merge import MergeResult, merge_service
from ..services.kube.base import SERVICE
from .base import ChildHandler


class ServiceHandler(ChildHandler):
    """Manages the Service while ``spec.service`` is set.

    Allocated node ports are kept across updates unless the Phare carries the
    reallocation annotation.
    """

    kind = SERVICE

    def requested(self, parent: Phare) -> bool:
        return parent.service is not None

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_service(parent)

    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        return MergeResult(merge_service(observed, desired, not parent.reallocate_node_ports))

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        return service_differs(observed, desired, not parent.reallocate_node_ports)
