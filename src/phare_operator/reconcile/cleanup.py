"""Ownership-scoped deletion of children a Phare no longer requests."""

from __future__ import annotations

import logging

from .. import metrics
from ..models import Phare
from ..services.kube.base import ObjectStore, ResourceKind
from ..utils.errors import KindNotRegisteredError
from ..utils.events import EventSink, emit_resource_deleted
from ..utils.ownership import is_controlled_by

logger = logging.getLogger(__name__)


def cleanup(
    store: ObjectStore,
    kind: ResourceKind,
    name: str,
    parent: Phare,
    events: EventSink,
) -> bool:
    """Delete ``kind/name`` in the parent's namespace if *parent* controls it.

    A missing object, a kind the cluster does not serve, and an object
    controlled by someone else are all left alone without error. A delete
    that races with another deleter is treated as success.

    Returns:
        True if this call deleted the object
    """
    try:
        existing = store.get(kind, parent.namespace, name)
    except KindNotRegisteredError:
        logger.debug(f"{kind} is not served; nothing to clean up for {parent.namespace}/{name}")
        return False

    if existing is None:
        return False

    if not is_controlled_by(existing, parent):
        logger.info(f"Leaving {kind.kind} {parent.namespace}/{name} alone: not controlled by Phare {parent.name}")
        metrics.child_operations_total.labels(kind=kind.kind, operation="skip_foreign").inc()
        return False

    if not store.delete(kind, parent.namespace, name):
        return False

    metrics.child_operations_total.labels(kind=kind.kind, operation="delete").inc()
    emit_resource_deleted(events, parent.event_target(), kind.kind, name)
    return True
