"""Object store backed by the Kubernetes dynamic client."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

from kubernetes import client, config
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import ResourceNotFoundError

from ... import metrics
from ...constants import FIELD_MANAGER
from ...utils.errors import KindNotRegisteredError, is_not_found
from .base import ResourceKind

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

MERGE_PATCH = "application/merge-patch+json"


def load_kube_configuration() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded local kubeconfig")


class KubernetesObjectStore:
    """ObjectStore implementation on ``kubernetes.dynamic.DynamicClient``."""

    def __init__(self, dynamic_client: DynamicClient | None = None) -> None:
        """Initialize the store.

        Args:
            dynamic_client: Client to use; one is built from the active kube
                configuration when omitted
        """
        if dynamic_client is None:
            load_kube_configuration()
            dynamic_client = DynamicClient(client.ApiClient())
        self.client = dynamic_client

    def _resource(self, kind: ResourceKind) -> Any:
        try:
            return self.client.resources.get(api_version=kind.api_version, kind=kind.kind)
        except ResourceNotFoundError as e:
            raise KindNotRegisteredError(f"{kind} is not served by the cluster") from e

    def _call(self, kind: ResourceKind, operation: str, fn: Callable[[], _T]) -> _T:
        """Run an API call, recording count and duration."""
        start_time = time.time()
        result = "success"
        try:
            return fn()
        except Exception as e:
            result = "not_found" if is_not_found(e) else "error"
            raise
        finally:
            metrics.api_call_total.labels(kind=kind.kind, operation=operation, result=result).inc()
            metrics.api_call_duration_seconds.labels(kind=kind.kind, operation=operation).observe(
                time.time() - start_time
            )

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any] | None:
        resource = self._resource(kind)
        try:
            obj = self._call(kind, "get", lambda: resource.get(name=name, namespace=namespace))
        except Exception as e:
            if is_not_found(e):
                return None
            raise
        return obj.to_dict()

    def list(self, kind: ResourceKind, namespace: str, label_selector: str | None = None) -> list[dict[str, Any]]:
        resource = self._resource(kind)
        result = self._call(
            kind, "list", lambda: resource.get(namespace=namespace, label_selector=label_selector)
        )
        return result.to_dict().get("items") or []

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        resource = self._resource(kind)
        namespace = body["metadata"].get("namespace")
        created = self._call(
            kind,
            "create",
            lambda: resource.create(body=body, namespace=namespace, field_manager=FIELD_MANAGER),
        )
        return created.to_dict()

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        resource = self._resource(kind)
        namespace = body["metadata"].get("namespace")
        replaced = self._call(
            kind,
            "update",
            lambda: resource.replace(body=body, namespace=namespace, field_manager=FIELD_MANAGER),
        )
        return replaced.to_dict()

    def patch(self, kind: ResourceKind, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        resource = self._resource(kind)
        patched = self._call(
            kind,
            "patch",
            lambda: resource.patch(
                body=body,
                name=name,
                namespace=namespace,
                content_type=MERGE_PATCH,
                field_manager=FIELD_MANAGER,
            ),
        )
        return patched.to_dict()

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        resource = self._resource(kind)
        try:
            self._call(kind, "delete", lambda: resource.delete(name=name, namespace=namespace))
        except Exception as e:
            if is_not_found(e):
                return False
            raise
        return True

    def patch_status(self, kind: ResourceKind, namespace: str, name: str, status: dict[str, Any]) -> None:
        resource = self._resource(kind)
        self._call(
            kind,
            "patch_status",
            lambda: resource.status.patch(
                body={"status": status},
                name=name,
                namespace=namespace,
                content_type=MERGE_PATCH,
                field_manager=FIELD_MANAGER,
            ),
        )
