"""Typed views over the Phare custom resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import (
    ANNOTATION_REALLOCATE_NODE_PORT,
    API_GROUP_VERSION,
    KIND_DEPLOYMENT,
    KIND_PHARE,
    KIND_STATEFUL_SET,
    TRUTHY_TOKENS,
)
from .utils.errors import UnsupportedKindError
from .utils.maps import copy_string_map


class WorkloadKind(str, Enum):
    """The two workload kinds a Phare can run as."""

    DEPLOYMENT = KIND_DEPLOYMENT
    STATEFUL_SET = KIND_STATEFUL_SET

    @classmethod
    def parse(cls, value: Any) -> WorkloadKind:
        """Parse ``spec.microservice.kind``.

        Raises:
            UnsupportedKindError: If the value is not a known workload kind
        """
        for member in cls:
            if member.value == value:
                return member
        raise UnsupportedKindError(f"unsupported kind: {value}")

    @property
    def other(self) -> WorkloadKind:
        """The kind that must not run alongside this one."""
        if self is WorkloadKind.DEPLOYMENT:
            return WorkloadKind.STATEFUL_SET
        return WorkloadKind.DEPLOYMENT


@dataclass
class Phare:
    """A fetched Phare object.

    ``body`` is the full decoded object; the other fields are shortcuts into it.
    """

    name: str
    namespace: str
    uid: str
    api_version: str = API_GROUP_VERSION
    kind: str = KIND_PHARE
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    spec: dict[str, Any] = field(default_factory=dict)
    status: dict[str, Any] = field(default_factory=dict)
    generation: int = 0
    body: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> Phare:
        """Build a Phare view from a decoded cluster object."""
        meta = obj.get("metadata") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", "default"),
            uid=meta.get("uid", ""),
            api_version=obj.get("apiVersion", API_GROUP_VERSION),
            kind=obj.get("kind", KIND_PHARE),
            labels=copy_string_map(meta.get("labels")),
            annotations=copy_string_map(meta.get("annotations")),
            spec=obj.get("spec") or {},
            status=obj.get("status") or {},
            generation=meta.get("generation", 0),
            body=obj,
        )

    @property
    def metadata(self) -> dict[str, Any]:
        """Metadata exposed to templates."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "uid": self.uid,
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
        }

    @property
    def microservice(self) -> dict[str, Any]:
        return self.spec.get("microservice") or {}

    @property
    def replica_count(self) -> int:
        """Desired replicas; 1 when omitted, an explicit 0 is kept."""
        value = self.microservice.get("replicaCount")
        return 1 if value is None else int(value)

    @property
    def service(self) -> dict[str, Any] | None:
        """``spec.service``, or None when not requested."""
        return self.spec.get("service") or None

    @property
    def toolchain(self) -> dict[str, Any]:
        return self.spec.get("toolchain") or {}

    @property
    def config(self) -> dict[str, str]:
        """``spec.toolchain.config``; empty when not requested."""
        return self.toolchain.get("config") or {}

    @property
    def http_route(self) -> dict[str, Any] | None:
        return self.toolchain.get("httpRoute") or None

    @property
    def health_check_policy(self) -> dict[str, Any] | None:
        return self.toolchain.get("healthCheckPolicy") or None

    @property
    def gcp_backend_policy(self) -> dict[str, Any] | None:
        return self.toolchain.get("gcpBackendPolicy") or None

    @property
    def reallocate_node_ports(self) -> bool:
        """Whether the node-port reallocation marker is set to a truthy token."""
        value = self.annotations.get(ANNOTATION_REALLOCATE_NODE_PORT)
        return value is not None and value.strip().lower() in TRUTHY_TOKENS

    @property
    def workload_kind(self) -> WorkloadKind:
        return WorkloadKind.parse(self.microservice.get("kind"))

    def event_target(self) -> dict[str, Any]:
        """Object reference suitable for posting events about this Phare."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "uid": self.uid,
            },
        }
