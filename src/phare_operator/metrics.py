"""Prometheus metrics for the Phare operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "phare_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "phare_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Managed child operations (create, update, delete, skip)
child_operations_total = Counter(
    "phare_operator_child_operations_total",
    "Total number of operations on managed child objects",
    ["kind", "operation"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "phare_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind"],
)

conflict_retries_total = Counter(
    "phare_operator_conflict_retries_total",
    "Total number of writes retried after a resourceVersion conflict",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "phare_operator_api_call_total",
    "Total number of Kubernetes API calls",
    ["kind", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "phare_operator_api_call_duration_seconds",
    "Duration of Kubernetes API calls in seconds",
    ["kind", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

error_total = Counter(
    "phare_operator_error_total",
    "Total number of reconcile errors by type",
    ["kind", "error_type"],
)
