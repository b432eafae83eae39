"""Main entry point for the Phare operator."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any

import kopf
from werkzeug.serving import make_server

from . import health
from . import logging as structured_logging
from .constants import API_GROUP_VERSION, CONTROLLER_ID, KIND_PHARE, LABEL_CREATED_BY
from .handlers.phare import PhareReconciler
from .services.kube import (
    CONFIG_MAP,
    DEPLOYMENT,
    GCP_BACKEND_POLICY,
    HEALTH_CHECK_POLICY,
    HTTP_ROUTE,
    PHARE,
    SERVICE,
    STATEFUL_SET,
    KubernetesObjectStore,
)
from .tracing import initialize_tracing
from .utils.workqueue import ReconcileQueue

logger = logging.getLogger(__name__)

DRIFT_CHECK_INTERVAL_SECONDS = int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300"))

CHILD_KINDS = (CONFIG_MAP, SERVICE, DEPLOYMENT, STATEFUL_SET, HTTP_ROUTE, HEALTH_CHECK_POLICY, GCP_BACKEND_POLICY)

_queue = ReconcileQueue()
_reconciler: PhareReconciler | None = None


def get_reconciler() -> PhareReconciler:
    """Return the process-wide reconciler, creating the cluster client on first use."""
    global _reconciler
    if _reconciler is None:
        _reconciler = PhareReconciler(KubernetesObjectStore())
    return _reconciler


def enqueue(namespace: str, name: str) -> None:
    """Reconcile a Phare, coalescing with a pass already running for it."""
    reconciler = get_reconciler()
    _queue.run((namespace, name), lambda: reconciler.reconcile(namespace, name))


def owning_phare(body: dict[str, Any]) -> str | None:
    """Name of the Phare that controls *body*, if any."""
    for ref in (body.get("metadata") or {}).get("ownerReferences") or []:
        if not ref.get("controller"):
            continue
        if ref.get("kind") == KIND_PHARE and (ref.get("apiVersion") or "").split("/")[0] == PHARE.group:
            return ref.get("name")
        return None
    return None


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Keep kopf's own bookkeeping out of the status subresource
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Exponential backoff on handler errors: 1s, 2s, 4s ... capped at 60s
    settings.execution.min_retry_delay = 1.0
    settings.execution.max_retry_delay = 60.0
    settings.execution.retry_backoff = 2.0
    settings.execution.backoff_jitter = 0.1

    # Metrics and health endpoints
    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    server = make_server("", metrics_port, health.create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    get_reconciler()


@kopf.on.create(API_GROUP_VERSION, KIND_PHARE)
@kopf.on.update(API_GROUP_VERSION, KIND_PHARE)
@kopf.on.resume(API_GROUP_VERSION, KIND_PHARE)
@kopf.timer(API_GROUP_VERSION, KIND_PHARE, interval=DRIFT_CHECK_INTERVAL_SECONDS)
def handle_phare(meta: dict[str, Any], **_: Any) -> None:
    """Reconcile a Phare on any change, on startup, and periodically for drift."""
    enqueue(meta["namespace"], meta["name"])


def handle_child_event(body: dict[str, Any], type: str | None, **_: Any) -> None:
    """Reconcile the owning Phare when one of its children changes."""
    name = owning_phare(body)
    if name is None:
        return
    namespace = body["metadata"]["namespace"]
    logger.debug(f"{body.get('kind')} {namespace}/{body['metadata'].get('name')} changed ({type}); reconciling Phare {name}")
    enqueue(namespace, name)


for _kind in CHILD_KINDS:
    kopf.on.event(
        _kind.api_version,
        _kind.kind,
        labels={LABEL_CREATED_BY: CONTROLLER_ID},
        id=f"child-{_kind.kind.lower()}",
    )(handle_child_event)


def run() -> None:
    """Run the operator, cluster-wide or in ``WATCH_NAMESPACE``."""
    namespace = os.getenv("WATCH_NAMESPACE", "")
    if namespace:
        kopf.run(namespaces=[namespace], standalone=True)
    else:
        kopf.run(clusterwide=True, standalone=True)


if __name__ == "__main__":
    run()
