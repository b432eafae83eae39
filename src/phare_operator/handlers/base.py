"""Base handler with the shared create-or-patch-or-cleanup flow for child kinds."""

from __future__ import annotations

import logging
from typing import Any

from .. import metrics
from ..logging import log_resource_event
from ..models import Phare
from ..reconcile.cleanup import cleanup
from ..reconcile.merge import MergeResult
from ..reconcile.patches import create_merge_patch, with_resource_version
from ..services.kube.base import ObjectStore, ResourceKind
from ..utils.errors import OwnershipConflictError, sanitize_exception
from ..utils.events import EventSink, emit_immutable_field, emit_resource_created, emit_resource_updated
from ..utils.ownership import child_name, is_controlled_by
from ..utils.retry import retry_on_conflict


class ChildHandler:
    """Reconciles one managed child kind for a Phare.

    Subclasses say whether the Phare requests the child, how to build it, how
    to merge it into the observed object and how to detect drift. The flow
    itself (get, create or ownership check, merge, patch, cleanup) lives here.
    """

    kind: ResourceKind

    def __init__(self, store: ObjectStore, events: EventSink) -> None:
        """Initialize the handler.

        Args:
            store: Cluster object store
            events: Sink for events about the parent Phare
        """
        self.store = store
        self.events = events
        self.logger = logging.getLogger(__name__)

    # Logging

    def _log(self, level: int, parent: Phare, message: str, event: str, reason: str, **kwargs: Any) -> None:
        log_resource_event(
            self.logger,
            resource_kind=self.kind.kind,
            resource_name=parent.name,
            namespace=parent.namespace,
            uid=parent.uid,
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(self, parent: Phare, message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured log message about *parent*'s child."""
        self._log(logging.INFO, parent, message, event, reason, **kwargs)

    def log_warning(
        self, parent: Phare, message: str, event: str = "warning", reason: str = "Warning", **kwargs: Any
    ) -> None:
        """Log a warning-level structured log message about *parent*'s child."""
        self._log(logging.WARNING, parent, message, event, reason, **kwargs)

    def log_error(
        self,
        parent: Phare,
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message, with sanitized error details."""
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
        self._log(logging.ERROR, parent, message, event, reason, **kwargs)

    # Per-kind behaviour

    def resource_kind(self, parent: Phare) -> ResourceKind:
        return self.kind

    def name(self, parent: Phare) -> str:
        return child_name(parent)

    def requested(self, parent: Phare) -> bool:
        raise NotImplementedError

    def build(self, parent: Phare) -> dict[str, Any]:
        raise NotImplementedError

    def merge(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> MergeResult:
        raise NotImplementedError

    def differs(self, observed: dict[str, Any], desired: dict[str, Any], parent: Phare) -> bool:
        raise NotImplementedError

    # Flow

    def reconcile(self, parent: Phare) -> None:
        """Bring the child in line with *parent*: create, patch, or clean up."""
        kind = self.resource_kind(parent)
        if not self.requested(parent):
            cleanup(self.store, kind, self.name(parent), parent, self.events)
            return

        desired = self.build(parent)
        retry_on_conflict(lambda: self.sync(parent, desired), kind.kind)

    def sync(self, parent: Phare, desired: dict[str, Any]) -> None:
        """One read-modify-write attempt; raises ``ApiException`` 409 on a lost race."""
        kind = self.resource_kind(parent)
        name = desired["metadata"]["name"]
        observed = self.store.get(kind, parent.namespace, name)

        if observed is None:
            self.store.create(kind, desired)
            metrics.child_operations_total.labels(kind=kind.kind, operation="create").inc()
            emit_resource_created(self.events, parent.event_target(), kind.kind, name)
            self.log_info(parent, f"Created {kind.kind} {name}", event="created", reason="CreatedResource")
            return

        if not is_controlled_by(observed, parent):
            raise OwnershipConflictError(
                f"{kind.kind} {parent.namespace}/{name} exists but is not controlled by Phare {parent.name}"
            )

        result = self.merge(observed, desired, parent)
        for warning in result.warnings:
            self.log_warning(parent, warning, reason="ImmutableField")
            emit_immutable_field(self.events, parent.event_target(), warning)

        if not self.differs(observed, desired, parent):
            self.logger.debug(f"No changes detected for {kind.kind} {parent.namespace}/{name}")
            return

        patch = create_merge_patch(observed, result.obj)
        if not patch:
            return

        metrics.drift_detected_total.labels(kind=kind.kind).inc()
        self.store.patch(kind, parent.namespace, name, with_resource_version(patch, observed))
        metrics.child_operations_total.labels(kind=kind.kind, operation="update").inc()
        emit_resource_updated(self.events, parent.event_target(), kind.kind, name)
        self.log_info(parent, f"Patched {kind.kind} {name}", event="updated", reason="UpdatedResource")
