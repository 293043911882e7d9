"""
Cooperative cancellation shared by the worker pool and the blame invoker.

A token is cancelled once and stays cancelled. Callbacks registered while a
resource is live (typically ``proc.kill`` for a running git process) are run
exactly once on cancellation, or immediately if the token is already
cancelled when they are registered.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Callable, Iterator

LOG = logging.getLogger(__name__)


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()
        # Reentrant: the SIGINT handler may cancel while the main thread holds it.
        self._lock = threading.RLock()
        self._callbacks: dict[int, Callable[[], object]] = {}
        self._next_id = 0
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        LOG.debug("cancellation requested (%s); running %d callbacks", reason or "no reason", len(callbacks))
        for cb in callbacks:
            _run_callback(cb)

    @contextlib.contextmanager
    def on_cancel(self, callback: Callable[[], object]) -> Iterator[None]:
        with self._lock:
            if self._event.is_set():
                handle = None
            else:
                handle = self._next_id
                self._next_id += 1
                self._callbacks[handle] = callback
        if handle is None:
            _run_callback(callback)
        try:
            yield
        finally:
            if handle is not None:
                with self._lock:
                    self._callbacks.pop(handle, None)


def _run_callback(callback: Callable[[], object]) -> None:
    try:
        callback()
    except OSError as e:
        # The process may already have exited between registration and kill.
        LOG.debug("cancel callback failed: %s", e)
