"""Builder for the Gateway API HTTPRoute."""

from __future__ import annotations

from typing import Any

from ..models import Phare
from ..services.kube.base import HTTP_ROUTE
from ..utils.errors import BuildError
from ..utils.maps import canonicalize, set_or_remove
from .base import new_child, owned

ROUTE_SPEC_FIELDS = ("parentRefs", "hostnames", "rules")


def build_http_route(parent: Phare) -> dict[str, Any]:
    """Build the desired HTTPRoute from ``toolchain.httpRoute``.

    Raises:
        BuildError: If no route is requested or the owner reference cannot be set
    """
    requested = parent.http_route
    if requested is None:
        raise BuildError(f"{parent.namespace}/{parent.name} does not request an HTTPRoute")

    spec: dict[str, Any] = {}
    for field_name in ROUTE_SPEC_FIELDS:
        set_or_remove(spec, field_name, canonicalize(requested.get(field_name)))

    route = new_child(HTTP_ROUTE, parent)
    route["spec"] = spec
    return owned(route, parent)
