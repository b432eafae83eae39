"""Tests for the per-key reconcile queue."""

from __future__ import annotations

import threading

import pytest

from phare_operator.utils.workqueue import ReconcileQueue


class TestReconcileQueue:
    """Test cases for ReconcileQueue."""

    def test_runs_once(self):
        """Test a single uncontended request."""
        queue = ReconcileQueue()
        calls = []
        assert queue.run("a", lambda: calls.append(1))
        assert calls == [1]
        assert not queue.is_running("a")

    def test_requests_during_run_coalesce_into_one_pass(self):
        """Test that many requests during a pass cause exactly one more pass."""
        queue = ReconcileQueue()
        calls = []

        def reconcile():
            calls.append(len(calls))
            if len(calls) == 1:
                for _ in range(5):
                    assert not queue.run("a", reconcile)

        assert queue.run("a", reconcile)
        assert calls == [0, 1]
        assert not queue.is_running("a")

    def test_different_keys_do_not_coalesce(self):
        """Test that other keys run while one is busy."""
        queue = ReconcileQueue()
        calls = []

        def reconcile_a():
            calls.append("a")
            assert queue.run("b", lambda: calls.append("b"))

        queue.run("a", reconcile_a)
        assert calls == ["a", "b"]

    def test_error_releases_key(self):
        """Test that a failing pass does not leave the key stuck."""
        queue = ReconcileQueue()

        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            queue.run("a", boom)
        assert not queue.is_running("a")
        assert queue.run("a", lambda: None)

    def test_request_coalesced_into_failing_pass_still_runs(self):
        """Test that a failed pass still runs the extra pass requested during it."""
        queue = ReconcileQueue()
        calls = []

        def reconcile():
            calls.append(len(calls))
            if len(calls) == 1:
                assert not queue.run("a", reconcile)
                raise RuntimeError("boom")

        assert queue.run("a", reconcile)
        assert calls == [0, 1]
        assert not queue.is_running("a")

    def test_error_of_last_pass_is_raised(self):
        """Test that the error is raised when the extra pass fails too."""
        queue = ReconcileQueue()
        calls = []

        def reconcile():
            calls.append(len(calls))
            if len(calls) == 1:
                queue.run("a", reconcile)
            raise RuntimeError(f"pass {len(calls)}")

        with pytest.raises(RuntimeError, match="pass 2"):
            queue.run("a", reconcile)
        assert calls == [0, 1]
        assert not queue.is_running("a")

    def test_concurrent_threads(self):
        """Test that a second thread is coalesced while the first runs."""
        queue = ReconcileQueue()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow():
            calls.append(1)
            started.set()
            release.wait(timeout=5)

        worker = threading.Thread(target=queue.run, args=("a", slow))
        worker.start()
        assert started.wait(timeout=5)
        assert not queue.run("a", slow)
        release.set()
        worker.join(timeout=5)
        assert len(calls) == 2
