"""Tests for the Phare model."""

from __future__ import annotations

import pytest

from phare_operator.constants import ANNOTATION_REALLOCATE_NODE_PORT
from phare_operator.models import Phare, WorkloadKind
from phare_operator.utils.errors import UnsupportedKindError


class TestWorkloadKind:
    """Test cases for WorkloadKind."""

    def test_parse(self):
        """Test parsing known kinds."""
        assert WorkloadKind.parse("Deployment") is WorkloadKind.DEPLOYMENT
        assert WorkloadKind.parse("StatefulSet") is WorkloadKind.STATEFUL_SET

    @pytest.mark.parametrize("value", ["DaemonSet", "deployment", "", None])
    def test_parse_unsupported(self, value):
        """Test that anything else is rejected."""
        with pytest.raises(UnsupportedKindError, match="unsupported kind"):
            WorkloadKind.parse(value)

    def test_other(self):
        """Test the opposite kind."""
        assert WorkloadKind.DEPLOYMENT.other is WorkloadKind.STATEFUL_SET
        assert WorkloadKind.STATEFUL_SET.other is WorkloadKind.DEPLOYMENT


class TestPhare:
    """Test cases for the Phare view."""

    def test_from_object(self, make_phare):
        """Test identity fields."""
        phare = make_phare(name="web", namespace="apps", uid="u1")
        assert (phare.name, phare.namespace, phare.uid) == ("web", "apps", "u1")
        assert phare.event_target()["metadata"] == {"name": "web", "namespace": "apps", "uid": "u1"}

    def test_replica_count(self, make_phare):
        """Test the replica default and explicit zero."""
        assert make_phare(replicas=None).replica_count == 1
        assert make_phare(replicas=0).replica_count == 0
        assert make_phare(replicas=4).replica_count == 4

    def test_optional_sections(self, make_phare):
        """Test that empty sections mean not requested."""
        phare = make_phare(service={}, toolchain={"config": {}, "httpRoute": {}})
        assert phare.service is None
        assert phare.config == {}
        assert phare.http_route is None
        assert phare.health_check_policy is None

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        (" Yes ", True),
        ("1", True),
        ("on", True),
        ("false", False),
        ("", False),
    ])
    def test_reallocate_node_ports(self, make_phare, value, expected):
        """Test the truthy tokens of the reallocation marker."""
        phare = make_phare(annotations={ANNOTATION_REALLOCATE_NODE_PORT: value})
        assert phare.reallocate_node_ports is expected

    def test_reallocate_node_ports_absent(self, make_phare):
        """Test that no marker means no reallocation."""
        assert make_phare().reallocate_node_ports is False

    def test_metadata_for_templates(self):
        """Test the template context built from metadata."""
        phare = Phare.from_object({"metadata": {"name": "a", "namespace": "b", "uid": "c", "labels": {"x": "y"}}})
        assert phare.metadata == {
            "name": "a",
            "namespace": "b",
            "uid": "c",
            "labels": {"x": "y"},
            "annotations": {},
        }
