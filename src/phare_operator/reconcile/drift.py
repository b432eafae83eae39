"""Drift detection between observed and desired child objects.

Every detector is pure: it normalizes both sides (dropping what the platform
defaults or allocates, and treating null and empty collections as absent)
and reports whether a patch is needed.
"""

from __future__ import annotations

from typing import Any, Mapping

from kubernetes.utils import parse_quantity

from ..utils.maps import canonicalize, deep_copy, get_path, prune_empty, string_maps_equal
from .merge import merge_service_spec, merge_workload

# Container fields the API server fills in on its own.
DEFAULTED_CONTAINER_FIELDS = ("terminationMessagePath", "terminationMessagePolicy", "imagePullPolicy")
DEFAULTED_PROBE_FIELDS = ("timeoutSeconds", "successThreshold", "failureThreshold", "periodSeconds")
PROBE_FIELDS = ("livenessProbe", "readinessProbe", "startupProbe")
VOLUME_SOURCES_WITH_MODE = ("configMap", "secret", "downwardAPI", "projected")
DEFAULT_VOLUME_MODE = 420
RESOURCE_SECTIONS = ("limits", "requests")

GATEWAY_API_GROUP = "gateway.networking.k8s.io"


def labels_missing(observed: Mapping[str, str] | None, desired: Mapping[str, str] | None) -> bool:
    """True if a desired key is absent from, or different in, *observed*."""
    observed = observed or {}
    return any(observed.get(key) != value for key, value in (desired or {}).items())


def _metadata_drift(observed: dict[str, Any], desired: dict[str, Any], *keys: str) -> bool:
    return any(
        labels_missing(get_path(observed, "metadata", key), get_path(desired, "metadata", key)) for key in keys
    )


# Workloads


def _normalize_probe(probe: dict[str, Any]) -> None:
    for field_name in DEFAULTED_PROBE_FIELDS:
        probe.pop(field_name, None)
    if isinstance(probe.get("httpGet"), dict):
        probe["httpGet"].pop("scheme", None)


def _normalize_quantities(resources: dict[str, Any]) -> None:
    """Rewrite quantities to a canonical number so ``0.5`` equals ``500m``.

    Values that do not parse are compared as written.
    """
    for section_name in RESOURCE_SECTIONS:
        section = resources.get(section_name)
        if not isinstance(section, dict):
            continue
        for name, quantity in section.items():
            try:
                section[name] = str(parse_quantity(quantity).normalize())
            except (TypeError, ValueError):
                continue


def _normalize_container(container: dict[str, Any]) -> dict[str, Any]:
    container = deep_copy(container)
    for field_name in DEFAULTED_CONTAINER_FIELDS:
        container.pop(field_name, None)
    if isinstance(container.get("resources"), dict):
        _normalize_quantities(container["resources"])
    for field_name in PROBE_FIELDS:
        if isinstance(container.get(field_name), dict):
            _normalize_probe(container[field_name])
    for port in container.get("ports") or []:
        port.setdefault("protocol", "TCP")
    for env in container.get("env") or []:
        field_ref = get_path(env, "valueFrom", "fieldRef")
        if isinstance(field_ref, dict):
            field_ref.setdefault("apiVersion", "v1")
    return container


def _normalize_volume(volume: dict[str, Any]) -> dict[str, Any]:
    volume = deep_copy(volume)
    for source in VOLUME_SOURCES_WITH_MODE:
        if isinstance(volume.get(source), dict):
            volume[source].setdefault("defaultMode", DEFAULT_VOLUME_MODE)
    host_path = volume.get("hostPath")
    if isinstance(host_path, dict) and not host_path.get("type"):
        host_path.pop("type", None)
    return volume


def _workload_owned_fields(obj: dict[str, Any]) -> dict[str, Any]:
    spec = obj.get("spec") or {}
    template = spec.get("template") or {}
    pod_spec = template.get("spec") or {}
    return prune_empty({
        "labels": get_path(obj, "metadata", "labels"),
        "replicas": spec.get("replicas"),
        "templateLabels": get_path(template, "metadata", "labels"),
        "templateAnnotations": get_path(template, "metadata", "annotations"),
        "containers": [_normalize_container(c) for c in pod_spec.get("containers") or []],
        "initContainers": [_normalize_container(c) for c in pod_spec.get("initContainers") or []],
        "volumes": [_normalize_volume(v) for v in pod_spec.get("volumes") or []],
        "tolerations": pod_spec.get("tolerations"),
        "affinity": pod_spec.get("affinity"),
    })


def workload_differs(observed: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Whether merging *desired* into *observed* would change an owned field.

    Containers and volumes not named by *desired* are judged by the same
    preservation rules as the merge, so injected sidecars are never drift.
    """
    merged = merge_workload(observed, desired).obj
    return canonicalize(_workload_owned_fields(observed)) != canonicalize(_workload_owned_fields(merged))


# Services


def _normalize_service_ports(
    ports: list[dict[str, Any]] | None,
    reference: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """Default protocol and targetPort; drop node ports the *reference* leaves unset."""
    normalized = []
    reference = reference or []
    for index, port in enumerate(ports or []):
        port = deep_copy(port)
        port.setdefault("protocol", "TCP")
        if port.get("targetPort") is None:
            port["targetPort"] = port.get("port")
        if index < len(reference) and not reference[index].get("nodePort"):
            port.pop("nodePort", None)
        normalized.append(port)
    return normalized


def service_differs(observed: dict[str, Any], desired: dict[str, Any], preserve_node_ports: bool = True) -> bool:
    """Compare ports, selector, type and managed labels/annotations.

    The desired side is first run through the same allocation-preserving
    merge that an update would apply. Node ports the desired side does not
    pin are ignored, so platform allocation never counts as drift.
    """
    observed_spec = observed.get("spec") or {}
    merged_spec = merge_service_spec(observed_spec, desired.get("spec"), preserve_node_ports)

    merged_ports = merged_spec.get("ports")
    if canonicalize(_normalize_service_ports(observed_spec.get("ports"), merged_ports)) != canonicalize(
        _normalize_service_ports(merged_ports, merged_ports)
    ):
        return True
    if not string_maps_equal(observed_spec.get("selector"), merged_spec.get("selector")):
        return True
    if (observed_spec.get("type") or "ClusterIP") != (merged_spec.get("type") or "ClusterIP"):
        return True
    return _metadata_drift(observed, desired, "labels", "annotations")


# ConfigMaps


def config_map_differs(observed: dict[str, Any], desired: dict[str, Any]) -> bool:
    if not string_maps_equal(observed.get("data"), desired.get("data")):
        return True
    return _metadata_drift(observed, desired, "labels")


# Opaque JSON kinds


def canonical_spec(spec: Any) -> Any:
    """JSON round-trip plus removal of null and empty values."""
    return prune_empty(canonicalize(spec))


def unstructured_differs(observed: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Structural comparison of ``spec`` for kinds without a client-side schema.

    Fields present only on the observed side count as drift.
    """
    if canonical_spec(observed.get("spec")) != canonical_spec(desired.get("spec")):
        return True
    return _metadata_drift(observed, desired, "labels")


def _default_http_route_spec(spec: Any) -> Any:
    spec = canonical_spec(spec) or {}
    for ref in spec.get("parentRefs") or []:
        ref.setdefault("group", GATEWAY_API_GROUP)
        ref.setdefault("kind", "Gateway")
    for rule in spec.get("rules") or []:
        if not rule.get("matches"):
            rule["matches"] = [{"path": {"type": "PathPrefix", "value": "/"}}]
        for match in rule["matches"]:
            if isinstance(match.get("path"), dict):
                match["path"].setdefault("type", "PathPrefix")
                match["path"].setdefault("value", "/")
            for header in match.get("headers") or []:
                header.setdefault("type", "Exact")
            for param in match.get("queryParams") or []:
                param.setdefault("type", "Exact")
        for backend in rule.get("backendRefs") or []:
            backend.setdefault("group", "")
            backend.setdefault("kind", "Service")
            backend.setdefault("weight", 1)
    return spec


def http_route_differs(observed: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Like :func:`unstructured_differs`, with Gateway API defaults applied to both sides."""
    if _default_http_route_spec(observed.get("spec")) != _default_http_route_spec(desired.get("spec")):
        return True
    return _metadata_drift(observed, desired, "labels")
