"""Object store interface and the kinds the operator manages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ...constants import (
    API_GROUP_VERSION,
    KIND_CONFIG_MAP,
    KIND_DEPLOYMENT,
    KIND_GCP_BACKEND_POLICY,
    KIND_HEALTH_CHECK_POLICY,
    KIND_HTTP_ROUTE,
    KIND_PHARE,
    KIND_SERVICE,
    KIND_STATEFUL_SET,
)


@dataclass(frozen=True)
class ResourceKind:
    """An API kind addressed by apiVersion and kind."""

    api_version: str
    kind: str

    @property
    def group(self) -> str:
        if "/" not in self.api_version:
            return ""
        return self.api_version.split("/", 1)[0]

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind}"


PHARE = ResourceKind(API_GROUP_VERSION, KIND_PHARE)
CONFIG_MAP = ResourceKind("v1", KIND_CONFIG_MAP)
SERVICE = ResourceKind("v1", KIND_SERVICE)
DEPLOYMENT = ResourceKind("apps/v1", KIND_DEPLOYMENT)
STATEFUL_SET = ResourceKind("apps/v1", KIND_STATEFUL_SET)
HTTP_ROUTE = ResourceKind("gateway.networking.k8s.io/v1beta1", KIND_HTTP_ROUTE)
HEALTH_CHECK_POLICY = ResourceKind("networking.gke.io/v1", KIND_HEALTH_CHECK_POLICY)
GCP_BACKEND_POLICY = ResourceKind("networking.gke.io/v1", KIND_GCP_BACKEND_POLICY)


class ObjectStore(Protocol):
    """Protocol defining the cluster operations the reconciler needs.

    Objects are decoded JSON dicts. Errors from the API server propagate as
    ``kubernetes`` ``ApiException`` (404 and 409 are checked with
    ``is_not_found``/``is_conflict``).
    """

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any] | None:
        """Get an object; None if it does not exist.

        Raises:
            KindNotRegisteredError: If the cluster does not serve *kind*
        """
        ...

    def list(self, kind: ResourceKind, namespace: str, label_selector: str | None = None) -> list[dict[str, Any]]:
        """List objects in a namespace, optionally filtered by label selector."""
        ...

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object and return the stored version."""
        ...

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        """Replace an object wholesale (requires ``metadata.resourceVersion``)."""
        ...

    def patch(self, kind: ResourceKind, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """Apply a JSON merge patch under the controller's field manager."""
        ...

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        """Delete an object.

        Returns:
            False if it was already gone
        """
        ...

    def patch_status(self, kind: ResourceKind, namespace: str, name: str, status: dict[str, Any]) -> None:
        """Merge-patch the status subresource."""
        ...
