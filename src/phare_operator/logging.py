"""Structured logging configuration for the Phare operator."""

import json
import logging
import os
import sys
from typing import Any

from .constants import CONTROLLER_ID
from .utils.context import get_context_dict
from .utils.errors import sanitize_dict


def setup_structured_logging() -> None:
    """Configure structured JSON logging.

    The level comes from ``LOG_LEVEL`` (default INFO).
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event.

    The current correlation ID (and trace ID, when tracing) is attached.
    Extra fields are redacted with :func:`sanitize_dict`.
    """
    log_data = {
        "controller": CONTROLLER_ID,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(sanitize_dict(get_context_dict(kwargs)))
    logger.log(level, json.dumps(log_data, default=str))
