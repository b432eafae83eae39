"""Utility functions for the Phare operator."""

from .context import get_context_dict, get_correlation_id, with_correlation_id
from .errors import (
    BuildError,
    KindNotRegisteredError,
    OwnershipConflictError,
    PhareError,
    UnsupportedKindError,
    is_conflict,
    is_not_found,
    sanitize_exception,
)
from .events import emit_event
from .hashing import hash_config_data
from .ownership import is_controlled_by, make_owner_reference, set_controller_reference
from .retry import retry_on_conflict
from .workqueue import ReconcileQueue

__all__ = [
    "BuildError",
    "KindNotRegisteredError",
    "OwnershipConflictError",
    "PhareError",
    "UnsupportedKindError",
    "is_conflict",
    "is_not_found",
    "sanitize_exception",
    "emit_event",
    "hash_config_data",
    "is_controlled_by",
    "make_owner_reference",
    "set_controller_reference",
    "retry_on_conflict",
    "ReconcileQueue",
    "get_context_dict",
    "get_correlation_id",
    "with_correlation_id",
]
