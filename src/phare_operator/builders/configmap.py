"""Builder for the managed config ConfigMap."""

from __future__ import annotations

import logging
from typing import Any

from ..models import Phare
from ..services.kube.base import CONFIG_MAP
from ..utils.ownership import config_map_name
from ..utils.templates import TemplateError, render
from .base import new_child, owned

logger = logging.getLogger(__name__)


def render_config_data(parent: Phare) -> dict[str, str]:
    """Return ``toolchain.config`` with template placeholders resolved.

    A value whose template fails to render is kept verbatim.
    """
    data: dict[str, str] = {}
    for key, value in parent.config.items():
        value = "" if value is None else str(value)
        try:
            data[key] = render(value, parent.metadata)
        except TemplateError as e:
            logger.warning(f"Keeping raw config value {key!r} for {parent.namespace}/{parent.name}: {e}")
            data[key] = value
    return data


def build_config_map(parent: Phare) -> dict[str, Any]:
    """Build the desired ConfigMap ``<name>-config``.

    Raises:
        BuildError: If the owner reference cannot be set
    """
    config_map = new_child(CONFIG_MAP, parent, name=config_map_name(parent))
    config_map["data"] = render_config_data(parent)
    return owned(config_map, parent)
