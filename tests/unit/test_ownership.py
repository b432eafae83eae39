"""Tests for ownership helpers."""

from __future__ import annotations

import pytest

from phare_operator.utils.errors import BuildError
from phare_operator.utils.ownership import (
    base_labels,
    config_map_name,
    get_controller_reference,
    is_controlled_by,
    make_owner_reference,
    set_controller_reference,
)


class TestNamesAndLabels:
    """Test cases for child identity helpers."""

    def test_config_map_name(self, make_phare):
        """Test the config map name suffix."""
        assert config_map_name(make_phare(name="web")) == "web-config"

    def test_base_labels(self, make_phare):
        """Test the labels every child carries."""
        assert base_labels(make_phare(name="web")) == {
            "app": "web",
            "app.kubernetes.io/created-by": "phare-controller",
        }


class TestSetControllerReference:
    """Test cases for set_controller_reference."""

    def test_sets_reference(self, make_phare):
        """Test that a controller reference is added."""
        parent = make_phare()
        obj = {"metadata": {"name": "demo", "namespace": "default"}}
        set_controller_reference(obj, parent)
        ref = get_controller_reference(obj)
        assert ref == make_owner_reference(parent)
        assert ref["controller"] is True
        assert ref["blockOwnerDeletion"] is True

    def test_idempotent(self, make_phare):
        """Test that setting twice leaves one reference."""
        parent = make_phare()
        obj = {"metadata": {"name": "demo", "namespace": "default"}}
        set_controller_reference(obj, parent)
        set_controller_reference(obj, parent)
        assert len(obj["metadata"]["ownerReferences"]) == 1

    def test_keeps_non_controller_references(self, make_phare):
        """Test that unrelated owner references survive."""
        parent = make_phare()
        other = {"apiVersion": "v1", "kind": "ConfigMap", "name": "x", "uid": "other"}
        obj = {"metadata": {"name": "demo", "namespace": "default", "ownerReferences": [other]}}
        set_controller_reference(obj, parent)
        assert obj["metadata"]["ownerReferences"][0] == other

    def test_missing_uid(self, make_phare):
        """Test that a parent without a UID cannot own anything."""
        with pytest.raises(BuildError):
            set_controller_reference({"metadata": {}}, make_phare(uid=""))

    def test_cross_namespace(self, make_phare):
        """Test that cross-namespace ownership is refused."""
        obj = {"metadata": {"name": "demo", "namespace": "other"}}
        with pytest.raises(BuildError, match="cross-namespace"):
            set_controller_reference(obj, make_phare())

    def test_other_controller(self, make_phare):
        """Test that an object controlled by someone else is refused."""
        obj = {"metadata": {"name": "demo", "namespace": "default"}}
        set_controller_reference(obj, make_phare(uid="first"))
        with pytest.raises(BuildError, match="already controlled"):
            set_controller_reference(obj, make_phare(uid="second"))


class TestIsControlledBy:
    """Test cases for is_controlled_by."""

    def test_controlled(self, make_phare):
        """Test an object stamped by the parent."""
        parent = make_phare()
        obj = set_controller_reference({"metadata": {"namespace": "default"}}, parent)
        assert is_controlled_by(obj, parent)

    def test_none_and_unowned(self, make_phare):
        """Test missing objects and objects without references."""
        parent = make_phare()
        assert not is_controlled_by(None, parent)
        assert not is_controlled_by({"metadata": {}}, parent)

    def test_non_controller_reference(self, make_phare):
        """Test that a plain owner reference is not control."""
        parent = make_phare()
        ref = dict(make_owner_reference(parent), controller=False)
        assert not is_controlled_by({"metadata": {"ownerReferences": [ref]}}, parent)

    def test_version_is_ignored(self, make_phare):
        """Test that only the API group, not the version, is compared."""
        parent = make_phare()
        ref = dict(make_owner_reference(parent), apiVersion="phare.localcorp.internal/v2")
        assert is_controlled_by({"metadata": {"ownerReferences": [ref]}}, parent)

    def test_different_group_or_kind(self, make_phare):
        """Test that group and kind are part of the identity."""
        parent = make_phare()
        wrong_group = dict(make_owner_reference(parent), apiVersion="other.io/v1beta1")
        wrong_kind = dict(make_owner_reference(parent), kind="Other")
        assert not is_controlled_by({"metadata": {"ownerReferences": [wrong_group]}}, parent)
        assert not is_controlled_by({"metadata": {"ownerReferences": [wrong_kind]}}, parent)
