"""Builders for the Deployment or StatefulSet running a Phare."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ANNOTATION_CONFIG_HASH,
    CONFIG_VOLUME_MOUNT_PATH,
    CONFIG_VOLUME_NAME,
    DEFAULT_VOLUME_MODE,
    LABEL_APP,
)
from ..models import Phare, WorkloadKind
from ..services.kube.base import DEPLOYMENT, STATEFUL_SET
from ..utils.errors import BuildError
from ..utils.hashing import hash_config_data
from ..utils.maps import copy_string_map, deep_copy, merge_string_maps, set_or_remove
from ..utils.ownership import config_map_name
from ..utils.templates import TemplateError, render
from .base import new_child, owned
from .configmap import render_config_data

# microservice fields copied onto the main container as-is
MAIN_CONTAINER_FIELDS = (
    "command",
    "args",
    "env",
    "envFrom",
    "ports",
    "resources",
    "volumeMounts",
    "livenessProbe",
    "readinessProbe",
    "startupProbe",
)


def image_reference(microservice: dict[str, Any]) -> str:
    image = microservice.get("image") or {}
    repository = image.get("repository") or ""
    tag = image.get("tag")
    if not repository:
        raise BuildError("microservice.image.repository is required")
    return f"{repository}:{tag}" if tag else repository


def _main_container(parent: Phare) -> dict[str, Any]:
    microservice = parent.microservice
    container: dict[str, Any] = {
        "name": parent.name,
        "image": image_reference(microservice),
    }
    if microservice.get("imagePullPolicy"):
        container["imagePullPolicy"] = microservice["imagePullPolicy"]
    for field_name in MAIN_CONTAINER_FIELDS:
        set_or_remove(container, field_name, microservice.get(field_name))

    http_get = (container.get("livenessProbe") or {}).get("httpGet")
    if http_get and http_get.get("path"):
        try:
            http_get["path"] = render(http_get["path"], parent.metadata)
        except TemplateError as e:
            raise BuildError(f"livenessProbe path: {e}") from e
    return container


def _config_volume(parent: Phare) -> dict[str, Any]:
    return {
        "name": CONFIG_VOLUME_NAME,
        "configMap": {
            "name": config_map_name(parent),
            "defaultMode": DEFAULT_VOLUME_MODE,
            "optional": False,
        },
    }


def _default_volume_mode(volume: dict[str, Any]) -> None:
    for source in ("secret", "configMap"):
        if isinstance(volume.get(source), dict):
            volume[source].setdefault("defaultMode", DEFAULT_VOLUME_MODE)
            return


def pod_labels(parent: Phare) -> dict[str, str]:
    """Pod labels: ``podLabels`` plus ``app=<name>``, which always wins."""
    return merge_string_maps(parent.microservice.get("podLabels"), {LABEL_APP: parent.name})


def selector_labels(parent: Phare) -> dict[str, str]:
    return {LABEL_APP: parent.name}


def build_pod_template(parent: Phare) -> dict[str, Any]:
    """Build the pod template shared by both workload kinds.

    When ``toolchain.config`` is set, the config volume is mounted first on
    the main container and the hash of the rendered config is stamped on the
    template so that a config-only change rolls the pods.
    """
    microservice = parent.microservice
    containers = [_main_container(parent)]
    containers.extend(deep_copy(microservice.get("extraContainers") or []))
    volumes = deep_copy(microservice.get("volumes") or [])
    annotations = copy_string_map(microservice.get("podAnnotations"))

    config = render_config_data(parent)
    if config:
        volumes.insert(0, _config_volume(parent))
        mount = {"name": CONFIG_VOLUME_NAME, "mountPath": CONFIG_VOLUME_MOUNT_PATH}
        containers[0]["volumeMounts"] = [mount] + containers[0].get("volumeMounts", [])
        annotations[ANNOTATION_CONFIG_HASH] = hash_config_data(config)

    for volume in volumes:
        _default_volume_mode(volume)

    pod_spec: dict[str, Any] = {"containers": containers}
    set_or_remove(pod_spec, "initContainers", microservice.get("initContainers"))
    set_or_remove(pod_spec, "volumes", volumes)
    set_or_remove(pod_spec, "affinity", microservice.get("affinity"))
    set_or_remove(pod_spec, "tolerations", microservice.get("tolerations"))

    metadata: dict[str, Any] = {"labels": pod_labels(parent)}
    if annotations:
        metadata["annotations"] = annotations
    return {"metadata": metadata, "spec": pod_spec}


def build_deployment(parent: Phare) -> dict[str, Any]:
    deployment = new_child(DEPLOYMENT, parent)
    deployment["spec"] = {
        "replicas": parent.replica_count,
        "selector": {"matchLabels": selector_labels(parent)},
        "template": build_pod_template(parent),
    }
    return owned(deployment, parent)


def build_stateful_set(parent: Phare) -> dict[str, Any]:
    """Build the desired StatefulSet.

    ``serviceName`` is the Phare name. ``volumeClaimTemplates`` only take
    effect at creation; later changes are reported, never applied.
    """
    stateful_set = new_child(STATEFUL_SET, parent)
    spec: dict[str, Any] = {
        "replicas": parent.replica_count,
        "serviceName": parent.name,
        "selector": {"matchLabels": selector_labels(parent)},
        "template": build_pod_template(parent),
    }
    set_or_remove(spec, "volumeClaimTemplates", parent.microservice.get("volumeClaimTemplates"))
    stateful_set["spec"] = spec
    return owned(stateful_set, parent)


def build_workload(parent: Phare, kind: WorkloadKind | None = None) -> dict[str, Any]:
    """Build the workload of *kind* (default: the kind the Phare asks for).

    Raises:
        UnsupportedKindError: If ``microservice.kind`` is not a workload kind
        BuildError: On invalid input or owner reference failure
    """
    kind = kind or parent.workload_kind
    if kind is WorkloadKind.DEPLOYMENT:
        return build_deployment(parent)
    if kind is WorkloadKind.STATEFUL_SET:
        return build_stateful_set(parent)
    raise BuildError(f"no builder for workload kind {kind}")
