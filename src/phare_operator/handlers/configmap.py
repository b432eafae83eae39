"""ConfigMap handler."""

from __future__ import annotations

from typing import Any

from ..builders.configmap import build_config_map
from ..models import Phare
from ..reconcile.drift import config_map_differs
from ..reconcile.merge import MergeResult, merge_config_map
from ..services.kube.base import CONFIG_MAP
from ..utils.ownership import config_map_name
from .base import ChildHandler


class ConfigMapHandler(ChildHandler):
    """Manages ``<name>-config`` while ``toolchain.config`` is non-empty."""

    kind = CONFIG_MAP

    def name(self, parent: Phare) -> str:
        return config_map_name(parent)

    def requested(self, parent: Phare) -> bool:
        return bool(parent.config)

    def build(self, parent: Phare) -> dict[str, Any]:
        return build_config_map(parent)

    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        return MergeResult(merge_config_map(observed, desired))

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        return config_map_differs(observed, desired)
