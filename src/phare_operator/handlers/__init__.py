"""Handlers for the Phare custom resource and its managed children."""

from .base import ChildHandler
from .configmap import ConfigMapHandler
from .httproute import HTTPRouteHandler
from .phare import PhareReconciler
from .policies import GCPBackendPolicyHandler, HealthCheckPolicyHandler
from .service import ServiceHandler
from .workload import WorkloadHandler

__all__ = [
    "ChildHandler",
    "ConfigMapHandler",
    "GCPBackendPolicyHandler",
    "HTTPRouteHandler",
    "HealthCheckPolicyHandler",
    "PhareReconciler",
    "ServiceHandler",
    "WorkloadHandler",
]
