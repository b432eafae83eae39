"""HTTPRoute handler."""

from __future__ import annotations

from typing import Any

from ..builders.httproute import build_http_route
from ..models import Phare
from ..reconcile.drift import http_route_differs
from ..reconcile.merge import MergeResult, merge_spec_object
from ..services.kube.base import HTTP_ROUTE
from .base import ChildHandler


class HTTPRouteHandler(ChildHandler):
    kind = HTTP_ROUTE

    def requested(self, parent: Phare) -> bool:
        return parent.http_route is not None

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_http_route(parent)

    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        return MergeResult(merge_spec_object(observed, desired))

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        return http_route_differs(observed, desired)
