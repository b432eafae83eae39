"""Bounded retry of read-modify-write steps on API conflicts."""

from __future__ import annotations

import logging
import os
from typing import Callable, TypeVar

from .. import metrics
from ..constants import DEFAULT_CONFLICT_RETRY_ATTEMPTS
from .errors import is_conflict

_T = TypeVar("_T")

logger = logging.getLogger(__name__)


def conflict_retry_attempts() -> int:
    """Number of attempts for a conflicting write, from ``CONFLICT_RETRY_ATTEMPTS``."""
    return max(1, int(os.getenv("CONFLICT_RETRY_ATTEMPTS", str(DEFAULT_CONFLICT_RETRY_ATTEMPTS))))


def retry_on_conflict(
    fn: Callable[[], _T],
    kind: str,
    attempts: int | None = None,
) -> _T:
    """Run *fn* and re-run it when the API reports a 409 Conflict.

    *fn* must perform its own fresh read on every call; a conflict means the
    object changed between read and write. Errors other than conflicts, and
    the final conflict once *attempts* are exhausted, are raised unchanged.

    Args:
        fn: The read-modify-write step
        kind: Child kind, used for metrics and logs
        attempts: Total attempts (default from the environment)

    Returns:
        Whatever *fn* returns
    """
    attempts = attempts or conflict_retry_attempts()
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as e:
            if not is_conflict(e) or attempt >= attempts:
                raise
            metrics.conflict_retries_total.labels(kind=kind).inc()
            logger.info(f"Conflict writing {kind}, retrying with a fresh read (attempt {attempt + 1}/{attempts})")
            attempt += 1
