"""Per-key serialization and coalescing of reconcile requests."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable

logger = logging.getLogger(__name__)


class ReconcileQueue:
    """Run at most one reconcile per key at a time, coalescing repeat requests.

    Requests are level-triggered: a request for a key that is already running
    marks it dirty and returns immediately; the running caller then performs
    exactly one more pass once the current one finishes, however many requests
    arrived meanwhile. Different keys never block each other.

    Attributes:
        ``_running``
            Keys with a pass in progress.
        ``_dirty``
            Keys that were requested while running and need another pass.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running: set[Hashable] = set()
        self._dirty: set[Hashable] = set()

    def run(self, key: Hashable, fn: Callable[[], None]) -> bool:
        """Reconcile *key* with *fn*, or coalesce into the pass already running.

        A failing pass does not drop requests coalesced into it: the extra pass
        still runs, and the error of the last pass (if any) is raised.

        Returns:
            True if this call executed *fn*, False if it was coalesced
        """
        with self._lock:
            if key in self._running:
                self._dirty.add(key)
                logger.debug(f"Coalesced reconcile request for {key}")
                return False
            self._running.add(key)

        error: Exception | None = None
        try:
            while True:
                with self._lock:
                    self._dirty.discard(key)
                try:
                    fn()
                    error = None
                except Exception as e:
                    error = e
                with self._lock:
                    if key not in self._dirty:
                        self._running.discard(key)
                        break
                if error is not None:
                    logger.debug(f"Reconcile of {key} failed with requests pending, running again")
        except BaseException:
            with self._lock:
                self._running.discard(key)
                self._dirty.discard(key)
            raise

        if error is not None:
            raise error
        return True

    def is_running(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._running
