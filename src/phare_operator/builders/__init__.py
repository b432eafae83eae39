"""Desired-state builders for the objects a Phare owns."""

from .configmap import build_config_map, render_config_data
from .httproute import build_http_route
from .policies import build_gcp_backend_policy, build_health_check_policy
from .service import build_service
from .workload import build_workload

__all__ = [
    "build_config_map",
    "render_config_data",
    "build_http_route",
    "build_gcp_backend_policy",
    "build_health_check_policy",
    "build_service",
    "build_workload",
]
