"""Kubernetes object store."""

from .base import (
    CONFIG_MAP,
    DEPLOYMENT,
    GCP_BACKEND_POLICY,
    HEALTH_CHECK_POLICY,
    HTTP_ROUTE,
    PHARE,
    SERVICE,
    STATEFUL_SET,
    ObjectStore,
    ResourceKind,
)
from .client import KubernetesObjectStore

__all__ = [
    "CONFIG_MAP",
    "DEPLOYMENT",
    "GCP_BACKEND_POLICY",
    "HEALTH_CHECK_POLICY",
    "HTTP_ROUTE",
    "PHARE",
    "SERVICE",
    "STATEFUL_SET",
    "KubernetesObjectStore",
    "ObjectStore",
    "ResourceKind",
]
