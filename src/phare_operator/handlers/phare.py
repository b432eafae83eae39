"""Top-level reconciliation of a Phare and all of its children."""

from __future__ import annotations

import logging
import time
from typing import Any

from .. import metrics
from ..constants import KIND_PHARE, PHASE_ACTIVE, PHASE_FAILED, PHASE_RECONCILING
from ..logging import log_resource_event
from ..models import Phare
from ..services.kube.base import PHARE, ObjectStore
from ..tracing import add_span_attribute, trace_span
from ..utils.context import with_correlation_id
from ..utils.errors import sanitize_exception
from ..utils.events import EventSink, emit_event, emit_reconcile_failed
from .base import ChildHandler
from .configmap import ConfigMapHandler
from .httproute import HTTPRouteHandler
from .policies import GCPBackendPolicyHandler, HealthCheckPolicyHandler
from .service import ServiceHandler
from .workload import WorkloadHandler

ACTIVE_MESSAGE = "All managed resources are reconciled"
RECONCILING_MESSAGE = "Creating managed resources"


class PhareReconciler:
    """Drives one Phare's children toward its spec.

    Steps run in a fixed order (config, service, route, backend policy,
    health-check policy, workload) and stop at the first failure. The status
    phase and message are only written when they change. A Phare without a
    phase is marked Reconciling before its children are first created.
    """

    def __init__(self, store: ObjectStore, events: EventSink = emit_event) -> None:
        self.store = store
        self.events = events
        self.logger = logging.getLogger(__name__)
        self.steps: list[ChildHandler] = [
            ConfigMapHandler(store, events),
            ServiceHandler(store, events),
            HTTPRouteHandler(store, events),
            GCPBackendPolicyHandler(store, events),
            HealthCheckPolicyHandler(store, events),
            WorkloadHandler(store, events),
        ]

    def _log(self, parent: Phare, message: str, reason: str, level: int = logging.INFO, **kwargs: Any) -> None:
        log_resource_event(
            self.logger,
            resource_kind=KIND_PHARE,
            resource_name=parent.name,
            namespace=parent.namespace,
            uid=parent.uid,
            event="reconcile",
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def reconcile(self, namespace: str, name: str) -> None:
        """Reconcile the Phare ``namespace/name``.

        A Phare that no longer exists, or is being deleted, is a no-op: its
        children are garbage collected through their owner references.

        Raises:
            Exception: The first step failure, after the Failed status was
                written (best effort)
        """
        with with_correlation_id(), trace_span(
            "phare.reconcile", kind=KIND_PHARE, attributes={"namespace": namespace, "name": name}
        ):
            obj = self.store.get(PHARE, namespace, name)
            if obj is None:
                self.logger.debug(f"Phare {namespace}/{name} not found; nothing to do")
                return
            if (obj.get("metadata") or {}).get("deletionTimestamp"):
                self.logger.debug(f"Phare {namespace}/{name} is being deleted; skipping")
                return

            parent = Phare.from_object(obj)
            add_span_attribute("phare.generation", parent.generation)
            self._reconcile(parent)

    def _reconcile(self, parent: Phare) -> None:
        metrics.reconcile_total.labels(kind=KIND_PHARE, result="started").inc()
        start_time = time.time()
        if not parent.status.get("phase"):
            self._mark_reconciling(parent)
        try:
            for step in self.steps:
                with trace_span(f"phare.reconcile.{type(step).__name__}", kind=step.resource_kind(parent).kind):
                    step.reconcile(parent)
        except Exception as e:
            sanitized_error = sanitize_exception(e)
            metrics.error_total.labels(kind=KIND_PHARE, error_type=type(e).__name__).inc()
            metrics.reconcile_total.labels(kind=KIND_PHARE, result="error").inc()
            self._log(
                parent,
                "Reconciliation failed",
                reason="ReconciliationFailed",
                level=logging.ERROR,
                error=sanitized_error,
                error_type=type(e).__name__,
            )
            self._report_failure(parent, sanitized_error)
            raise
        else:
            metrics.reconcile_total.labels(kind=KIND_PHARE, result="success").inc()
            self.update_status(parent, PHASE_ACTIVE, ACTIVE_MESSAGE)
        finally:
            metrics.reconcile_duration_seconds.labels(kind=KIND_PHARE).observe(time.time() - start_time)

    def _mark_reconciling(self, parent: Phare) -> None:
        """Best effort; a failed write is logged and the pass goes on."""
        try:
            self.update_status(parent, PHASE_RECONCILING, RECONCILING_MESSAGE)
        except Exception as status_error:
            self._log(
                parent,
                "Failed to mark Phare as reconciling",
                reason="StatusUpdateFailed",
                level=logging.WARNING,
                error=sanitize_exception(status_error),
            )

    def _report_failure(self, parent: Phare, message: str) -> None:
        """Record the failure on the Phare; never masks the original error."""
        try:
            emit_reconcile_failed(self.events, parent.event_target(), f"Reconciliation failed: {message}")
            self.update_status(parent, PHASE_FAILED, message)
        except Exception as status_error:
            self._log(
                parent,
                "Failed to record reconcile failure",
                reason="StatusUpdateFailed",
                level=logging.WARNING,
                error=sanitize_exception(status_error),
            )

    def update_status(self, parent: Phare, phase: str, message: str) -> bool:
        """Write ``status.phase``/``status.message`` unless they already match.

        Returns:
            True if a write was made
        """
        if parent.status.get("phase") == phase and parent.status.get("message") == message:
            return False
        self.store.patch_status(PHARE, parent.namespace, parent.name, {"phase": phase, "message": message})
        parent.status = {**parent.status, "phase": phase, "message": message}
        self._log(parent, f"Status set to {phase}", reason=phase)
        return True
