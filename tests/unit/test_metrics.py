"""Tests for Prometheus metrics."""

from __future__ import annotations

from phare_operator.metrics import (
    api_call_duration_seconds,
    api_call_total,
    child_operations_total,
    conflict_retries_total,
    drift_detected_total,
    error_total,
    reconcile_duration_seconds,
    reconcile_total,
)


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_reconcile_total_exists(self):
        """Test reconcile_total counter exists."""
        # Prometheus counters don't include "_total" in their _name attribute
        assert reconcile_total._name == "phare_operator_reconcile"

    def test_reconcile_duration_exists(self):
        """Test reconcile_duration_seconds histogram exists."""
        assert reconcile_duration_seconds._name == "phare_operator_reconcile_duration_seconds"

    def test_child_operations_total_exists(self):
        """Test child_operations_total counter exists."""
        assert child_operations_total._name == "phare_operator_child_operations"

    def test_drift_detected_total_exists(self):
        """Test drift_detected_total counter exists."""
        assert drift_detected_total._name == "phare_operator_drift_detected"

    def test_conflict_retries_total_exists(self):
        """Test conflict_retries_total counter exists."""
        assert conflict_retries_total._name == "phare_operator_conflict_retries"

    def test_api_call_metrics_exist(self):
        """Test API call metrics exist."""
        assert api_call_total._name == "phare_operator_api_call"
        assert api_call_duration_seconds._name == "phare_operator_api_call_duration_seconds"

    def test_error_total_exists(self):
        """Test error_total counter exists."""
        assert error_total._name == "phare_operator_error"


class TestMetricsLabels:
    """Test metric label sets."""

    def test_child_operations_labels(self):
        """Test child_operations_total accepts kind and operation."""
        before = child_operations_total.labels(kind="Service", operation="create")._value.get()
        child_operations_total.labels(kind="Service", operation="create").inc()
        after = child_operations_total.labels(kind="Service", operation="create")._value.get()
        assert after == before + 1

    def test_reconcile_total_labels(self):
        """Test reconcile_total accepts kind and result."""
        reconcile_total.labels(kind="Phare", result="success").inc()
