"""Shared fixtures: an in-memory object store and Phare factories."""

from __future__ import annotations

import copy
import itertools
from collections import Counter
from typing import Any

import pytest
from kubernetes.client.exceptions import ApiException

from phare_operator.constants import API_GROUP_VERSION, KIND_PHARE
from phare_operator.models import Phare
from phare_operator.services.kube.base import PHARE, SERVICE, ResourceKind
from phare_operator.utils.errors import KindNotRegisteredError

FIRST_NODE_PORT = 30080

# Quantities the API server rewrites into canonical form.
CANONICAL_QUANTITIES = {"0.5": "500m", "1024Mi": "1Gi", "2048Mi": "2Gi", "1000m": "1"}


def apply_merge_patch(target: Any, patch: Any) -> Any:
    """Apply an RFC 7386 merge patch the way the API server does."""
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result


class FakeObjectStore:
    """In-memory ObjectStore with a little API server behaviour.

    - create/patch bump ``resourceVersion``; a patch carrying a stale one is a 409
    - Services get a cluster IP, default protocol/targetPort, and node ports
      allocated from 30080 upwards for NodePort/LoadBalancer ports without one
    - containers get the usual defaulted fields
    - resource quantities are stored in canonical form, e.g. ``0.5`` becomes ``500m``
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.calls: Counter[str] = Counter()
        self.patches: list[tuple[str, str, dict[str, Any]]] = []
        self.unregistered: set[ResourceKind] = set()
        self.conflicts_remaining = 0
        self.fail_status_patch = False
        self._uids = itertools.count(1)
        self._versions = itertools.count(1)
        self._node_ports = itertools.count(FIRST_NODE_PORT)

    # Helpers for tests

    def _key(self, kind: ResourceKind, namespace: str, name: str) -> tuple[str, str, str, str]:
        return (kind.api_version, kind.kind, namespace, name)

    def add(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Store *obj* directly, as if another actor created it."""
        obj = copy.deepcopy(obj)
        metadata = obj.setdefault("metadata", {})
        metadata.setdefault("uid", f"uid-{next(self._uids)}")
        metadata["resourceVersion"] = str(next(self._versions))
        self.objects[self._key(kind, metadata["namespace"], metadata["name"])] = obj
        return copy.deepcopy(obj)

    def peek(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any] | None:
        obj = self.objects.get(self._key(kind, namespace, name))
        return copy.deepcopy(obj)

    def mutate(self, kind: ResourceKind, namespace: str, name: str, fn) -> None:
        """Change a stored object in place, as another actor would."""
        obj = self.objects[self._key(kind, namespace, name)]
        fn(obj)
        obj["metadata"]["resourceVersion"] = str(next(self._versions))

    def _check_registered(self, kind: ResourceKind) -> None:
        if kind in self.unregistered:
            raise KindNotRegisteredError(f"{kind} is not served by the cluster")

    def _apply_defaults(self, kind: ResourceKind, obj: dict[str, Any]) -> None:
        spec = obj.get("spec") or {}
        if kind == SERVICE:
            spec.setdefault("clusterIP", "10.0.0.10")
            spec.setdefault("clusterIPs", [spec["clusterIP"]])
            spec.setdefault("ipFamilies", ["IPv4"])
            spec.setdefault("ipFamilyPolicy", "SingleStack")
            spec.setdefault("sessionAffinity", "None")
            for port in spec.get("ports") or []:
                port.setdefault("protocol", "TCP")
                port.setdefault("targetPort", port.get("port"))
                if spec.get("type") in ("NodePort", "LoadBalancer") and not port.get("nodePort"):
                    port["nodePort"] = next(self._node_ports)
        template_spec = (spec.get("template") or {}).get("spec") or {}
        for container in template_spec.get("containers") or []:
            container.setdefault("imagePullPolicy", "IfNotPresent")
            container.setdefault("terminationMessagePath", "/dev/termination-log")
            container.setdefault("terminationMessagePolicy", "File")
            for section_name in ("limits", "requests"):
                section = (container.get("resources") or {}).get(section_name) or {}
                for name, quantity in section.items():
                    section[name] = CANONICAL_QUANTITIES.get(str(quantity), quantity)
            for port in container.get("ports") or []:
                port.setdefault("protocol", "TCP")
        if template_spec:
            template_spec.setdefault("restartPolicy", "Always")
            template_spec.setdefault("dnsPolicy", "ClusterFirst")

    # ObjectStore

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any] | None:
        self.calls["get"] += 1
        self._check_registered(kind)
        return self.peek(kind, namespace, name)

    def list(self, kind: ResourceKind, namespace: str, label_selector: str | None = None) -> list[dict[str, Any]]:
        self.calls["list"] += 1
        wanted = dict(part.split("=", 1) for part in label_selector.split(",")) if label_selector else {}
        items = []
        for (api_version, kind_name, ns, _), obj in self.objects.items():
            if (api_version, kind_name, ns) != (kind.api_version, kind.kind, namespace):
                continue
            labels = obj["metadata"].get("labels") or {}
            if all(labels.get(k) == v for k, v in wanted.items()):
                items.append(copy.deepcopy(obj))
        return items

    def create(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self.calls["create"] += 1
        self._check_registered(kind)
        metadata = body["metadata"]
        key = self._key(kind, metadata["namespace"], metadata["name"])
        if key in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        obj = copy.deepcopy(body)
        obj["metadata"]["uid"] = f"uid-{next(self._uids)}"
        obj["metadata"]["resourceVersion"] = str(next(self._versions))
        self._apply_defaults(kind, obj)
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def update(self, kind: ResourceKind, body: dict[str, Any]) -> dict[str, Any]:
        self.calls["update"] += 1
        metadata = body["metadata"]
        key = self._key(kind, metadata["namespace"], metadata["name"])
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        if metadata.get("resourceVersion") != self.objects[key]["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")
        obj = copy.deepcopy(body)
        obj["metadata"]["resourceVersion"] = str(next(self._versions))
        self._apply_defaults(kind, obj)
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def patch(self, kind: ResourceKind, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls["patch"] += 1
        self.patches.append((kind.kind, name, copy.deepcopy(body)))
        key = self._key(kind, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        if self.conflicts_remaining:
            self.conflicts_remaining -= 1
            raise ApiException(status=409, reason="Conflict")
        expected = (body.get("metadata") or {}).get("resourceVersion")
        if expected and expected != self.objects[key]["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")
        obj = apply_merge_patch(self.objects[key], body)
        obj["metadata"]["resourceVersion"] = str(next(self._versions))
        self._apply_defaults(kind, obj)
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        self.calls["delete"] += 1
        return self.objects.pop(self._key(kind, namespace, name), None) is not None

    def patch_status(self, kind: ResourceKind, namespace: str, name: str, status: dict[str, Any]) -> None:
        self.calls["patch_status"] += 1
        if self.fail_status_patch:
            raise ApiException(status=500, reason="Internal Server Error")
        obj = self.objects[self._key(kind, namespace, name)]
        obj["status"] = apply_merge_patch(obj.get("status") or {}, status)


class EventRecorder:
    """Event sink that keeps ``(reason, message, type)`` tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, str]] = []

    def __call__(self, body: dict[str, Any], reason: str, message: str, type_: str = "Normal") -> None:
        self.events.append((reason, message, type_))

    def reasons(self) -> list[str]:
        return [reason for reason, _, _ in self.events]


def phare_object(
    name: str = "demo",
    namespace: str = "default",
    uid: str = "phare-uid-1",
    kind: str = "Deployment",
    replicas: int | None = 1,
    service: dict[str, Any] | None = None,
    toolchain: dict[str, Any] | None = None,
    annotations: dict[str, str] | None = None,
    **microservice: Any,
) -> dict[str, Any]:
    """Build a decoded Phare object."""
    spec_microservice: dict[str, Any] = {
        "kind": kind,
        "image": {"repository": "registry.local/demo", "tag": "1.0.0"},
    }
    if replicas is not None:
        spec_microservice["replicaCount"] = replicas
    spec_microservice.update(microservice)
    spec: dict[str, Any] = {"microservice": spec_microservice}
    if service is not None:
        spec["service"] = service
    if toolchain is not None:
        spec["toolchain"] = toolchain
    metadata: dict[str, Any] = {"name": name, "namespace": namespace, "uid": uid, "generation": 1}
    if annotations:
        metadata["annotations"] = annotations
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_PHARE,
        "metadata": metadata,
        "spec": spec,
    }


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def events() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def make_phare():
    """Factory returning a ``Phare`` view."""

    def _make(**kwargs: Any) -> Phare:
        return Phare.from_object(phare_object(**kwargs))

    return _make


@pytest.fixture
def put_phare(store: FakeObjectStore):
    """Store a Phare object in the fake store, keeping its uid."""

    def _put(**kwargs: Any) -> dict[str, Any]:
        obj = phare_object(**kwargs)
        store.objects[store._key(PHARE, obj["metadata"]["namespace"], obj["metadata"]["name"])] = obj
        obj["metadata"]["resourceVersion"] = "1"
        return obj

    return _put
