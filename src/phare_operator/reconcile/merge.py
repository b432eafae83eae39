"""Field-level merge of desired state into observed objects.

Desired state is authoritative only for the fields the controller owns.
Containers and volumes are keyed by name so that structure injected by other
actors (sidecar injectors, humans) survives a reconcile.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import KIND_STATEFUL_SET
from ..utils.maps import deep_copy, get_path, merge_string_maps, prune_empty, set_or_remove

# Container fields the controller owns on containers it names.
AUTHORITATIVE_CONTAINER_FIELDS = (
    "command",
    "args",
    "resources",
    "livenessProbe",
    "readinessProbe",
    "startupProbe",
    "env",
    "envFrom",
    "volumeMounts",
    "ports",
)

# Service spec fields assigned by the platform.
ALLOCATED_SERVICE_FIELDS = (
    "clusterIP",
    "clusterIPs",
    "ipFamilies",
    "ipFamilyPolicy",
    "healthCheckNodePort",
    "loadBalancerClass",
)

NODE_PORT_SERVICE_TYPES = ("NodePort", "LoadBalancer")


@dataclass
class MergeResult:
    """A merged object plus non-fatal findings the caller should report."""

    obj: dict[str, Any]
    warnings: list[str] = field(default_factory=list)


def merge_container(observed: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Apply the desired container's owned fields onto the observed one.

    Fields outside the owned set (e.g. ``securityContext`` added by a webhook)
    are kept. ``imagePullPolicy`` is only set when desired names one.
    """
    merged = deep_copy(observed)
    merged["name"] = desired["name"]
    merged["image"] = desired.get("image")
    if desired.get("imagePullPolicy"):
        merged["imagePullPolicy"] = desired["imagePullPolicy"]
    for field_name in AUTHORITATIVE_CONTAINER_FIELDS:
        set_or_remove(merged, field_name, desired.get(field_name))
    return merged


def merge_containers(
    observed: list[dict[str, Any]] | None,
    desired: list[dict[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Name-keyed union of container lists.

    Observed order is kept; containers named in *desired* are updated in
    place, others are left untouched, and new desired containers are appended.
    """
    desired_by_name = {container["name"]: container for container in desired or []}
    merged = []
    seen = set()
    for current in observed or []:
        want = desired_by_name.get(current.get("name"))
        if want is None:
            merged.append(deep_copy(current))
            continue
        seen.add(want["name"])
        merged.append(merge_container(current, want))
    for want in desired or []:
        if want["name"] not in seen:
            merged.append(deep_copy(want))
    return merged


def referenced_volume_names(*container_lists: list[dict[str, Any]] | None) -> set[str]:
    """Names of volumes mounted (or attached as devices) by any container."""
    names = set()
    for containers in container_lists:
        for container in containers or []:
            for mount in container.get("volumeMounts") or []:
                names.add(mount.get("name"))
            for device in container.get("volumeDevices") or []:
                names.add(device.get("name"))
    return names


def merge_volumes(
    observed: list[dict[str, Any]] | None,
    desired: list[dict[str, Any]] | None,
    containers: list[dict[str, Any]] | None,
    init_containers: list[dict[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Name-keyed union of volumes, dropping orphans.

    A desired volume replaces the observed one of the same name. A volume not
    named in *desired* is kept only while one of the surviving *containers* or
    *init_containers* still references it.
    """
    desired_by_name = {volume["name"]: volume for volume in desired or []}
    in_use = referenced_volume_names(containers, init_containers)
    merged = []
    seen = set()
    for current in observed or []:
        name = current.get("name")
        if name in desired_by_name:
            merged.append(deep_copy(desired_by_name[name]))
            seen.add(name)
        elif name in in_use:
            merged.append(deep_copy(current))
    for want in desired or []:
        if want["name"] not in seen:
            merged.append(deep_copy(want))
    return merged


def _normalize_claim_template(template: dict[str, Any]) -> dict[str, Any]:
    template = deep_copy(template)
    for key in ("apiVersion", "kind", "status"):
        template.pop(key, None)
    (template.get("metadata") or {}).pop("creationTimestamp", None)
    spec = template.get("spec")
    if isinstance(spec, dict):
        spec.setdefault("volumeMode", "Filesystem")
    return prune_empty(template)


def volume_claim_templates_differ(
    observed: list[dict[str, Any]] | None,
    desired: list[dict[str, Any]] | None,
) -> bool:
    """Compare StatefulSet claim templates ignoring server-populated fields."""
    return [_normalize_claim_template(t) for t in observed or []] != [
        _normalize_claim_template(t) for t in desired or []
    ]


def merge_workload(observed: dict[str, Any], desired: dict[str, Any]) -> MergeResult:
    """Merge a desired Deployment/StatefulSet into the observed one.

    The selector is never touched (immutable). StatefulSet
    ``volumeClaimTemplates`` are never merged; a difference is returned as a
    warning instead.
    """
    merged = deep_copy(observed)
    warnings = []

    metadata = merged.setdefault("metadata", {})
    metadata["labels"] = merge_string_maps(metadata.get("labels"), get_path(desired, "metadata", "labels"))

    spec = merged.setdefault("spec", {})
    desired_spec = desired.get("spec") or {}
    spec["replicas"] = desired_spec.get("replicas")

    template = spec.setdefault("template", {})
    template_metadata = template.setdefault("metadata", {})
    set_or_remove(template_metadata, "labels", get_path(desired_spec, "template", "metadata", "labels"))
    set_or_remove(template_metadata, "annotations", get_path(desired_spec, "template", "metadata", "annotations"))

    pod_spec = template.setdefault("spec", {})
    desired_pod_spec = get_path(desired_spec, "template", "spec", default={})
    containers = merge_containers(pod_spec.get("containers"), desired_pod_spec.get("containers"))
    init_containers = merge_containers(pod_spec.get("initContainers"), desired_pod_spec.get("initContainers"))
    volumes = merge_volumes(pod_spec.get("volumes"), desired_pod_spec.get("volumes"), containers, init_containers)
    pod_spec["containers"] = containers
    set_or_remove(pod_spec, "initContainers", init_containers)
    set_or_remove(pod_spec, "volumes", volumes)
    set_or_remove(pod_spec, "tolerations", desired_pod_spec.get("tolerations"))
    set_or_remove(pod_spec, "affinity", desired_pod_spec.get("affinity"))

    if desired.get("kind") == KIND_STATEFUL_SET and volume_claim_templates_differ(
        spec.get("volumeClaimTemplates"), desired_spec.get("volumeClaimTemplates")
    ):
        warnings.append(
            f"VolumeClaimTemplates for StatefulSet {metadata.get('name')} cannot be changed after "
            "creation; delete and recreate to apply new templates"
        )

    return MergeResult(merged, warnings)


def service_port_key(port: dict[str, Any]) -> str:
    """Identity of a service port: its name, else ``<protocol>/<port>``."""
    if port.get("name"):
        return port["name"]
    return f"{port.get('protocol') or 'TCP'}/{port.get('port')}"


def merge_service_spec(
    observed: dict[str, Any] | None,
    desired: dict[str, Any] | None,
    preserve_node_ports: bool = True,
) -> dict[str, Any]:
    """Start from the desired spec and carry over what the platform allocated.

    Allocated addresses, IP families, the health-check node port and the load
    balancer class always come from *observed*. When *preserve_node_ports* is
    set, an allocated node port is copied onto the matching desired port that
    does not name one, as long as the merged type exposes node ports.
    """
    observed = observed or {}
    merged = deep_copy(desired or {})

    for field_name in ALLOCATED_SERVICE_FIELDS:
        if field_name in observed:
            merged[field_name] = deep_copy(observed[field_name])

    if preserve_node_ports and merged.get("type") in NODE_PORT_SERVICE_TYPES:
        allocated = {
            service_port_key(port): port.get("nodePort")
            for port in observed.get("ports") or []
            if port.get("nodePort")
        }
        for port in merged.get("ports") or []:
            if not port.get("nodePort") and service_port_key(port) in allocated:
                port["nodePort"] = allocated[service_port_key(port)]

    return merged


def merge_service(
    observed: dict[str, Any],
    desired: dict[str, Any],
    preserve_node_ports: bool = True,
) -> dict[str, Any]:
    """Merge a desired Service into the observed one.

    Labels and annotations are overlaid so that keys written by other
    controllers survive.
    """
    merged = deep_copy(observed)
    metadata = merged.setdefault("metadata", {})
    desired_metadata = desired.get("metadata") or {}
    metadata["labels"] = merge_string_maps(metadata.get("labels"), desired_metadata.get("labels"))
    set_or_remove(
        metadata,
        "annotations",
        merge_string_maps(metadata.get("annotations"), desired_metadata.get("annotations")),
    )
    merged["spec"] = merge_service_spec(observed.get("spec"), desired.get("spec"), preserve_node_ports)
    return merged


def merge_config_map(observed: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Desired ``data`` replaces the observed data; labels are overlaid."""
    merged = deep_copy(observed)
    metadata = merged.setdefault("metadata", {})
    metadata["labels"] = merge_string_maps(metadata.get("labels"), get_path(desired, "metadata", "labels"))
    set_or_remove(merged, "data", desired.get("data"))
    return merged


def merge_spec_object(observed: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Desired ``spec`` replaces the observed spec wholesale; labels are overlaid.

    Used for kinds handled as opaque JSON (HTTPRoute and the policy kinds).
    """
    merged = deep_copy(observed)
    metadata = merged.setdefault("metadata", {})
    metadata["labels"] = merge_string_maps(metadata.get("labels"), get_path(desired, "metadata", "labels"))
    merged["spec"] = deep_copy(desired.get("spec") or {})
    return merged
