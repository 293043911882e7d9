"""
Fixed-width worker pool fanning per-file blame invocations out over threads.

Workers claim paths one at a time from a shared dispatcher and hand every
result to `publish`, which is normally the `put` of the bounded result queue
read by the aggregator. Blocking on that queue is the backpressure mechanism.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sized
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Iterator, Optional

from .cancel import CancelToken
from .errors import PoolError
from .models import FileBlameResult

LOG = logging.getLogger(__name__)

Invoke = Callable[[str, CancelToken], FileBlameResult]
Publish = Callable[[FileBlameResult], None]
Progress = Callable[[int, Optional[int]], None]


class _Dispatcher:
    def __init__(self, paths: Iterable[str], token: CancelToken) -> None:
        self._it: Iterator[str] = iter(paths)
        self._token = token
        self._lock = threading.Lock()
        self.dispatched = 0

    def claim(self) -> str | None:
        with self._lock:
            if self._token.cancelled:
                return None
            try:
                path = next(self._it)
            except StopIteration:
                return None
            self.dispatched += 1
            return path


class WorkerPool:
    def __init__(
        self,
        invoke: Invoke,
        width: int,
        token: CancelToken,
        *,
        on_progress: Progress | None = None,
    ) -> None:
        if width < 1:
            raise ValueError(f"worker pool width must be >= 1, got {width}")
        self.invoke = invoke
        self.width = width
        self.token = token
        self.on_progress = on_progress
        self._progress_lock = threading.Lock()
        self.completed = 0

    def _report(self, total: int | None) -> None:
        with self._progress_lock:
            self.completed += 1
            if self.on_progress is None:
                return
            try:
                self.on_progress(self.completed, total)
            except Exception as e:
                LOG.debug("progress callback failed: %s", e)

    def _work(self, dispatcher: _Dispatcher, publish: Publish, total: int | None) -> None:
        while True:
            path = dispatcher.claim()
            if path is None:
                return
            result = self.invoke(path, self.token)
            publish(result)
            self._report(total)

    def run(self, paths: Iterable[str], publish: Publish) -> int:
        """
        Blame every path exactly once (until cancelled) and publish each result.

        Returns the number of paths dispatched to workers. Raises `PoolError`
        if the token was cancelled before starting or if a worker failed with
        an unexpected exception; in the latter case the token is cancelled so
        the remaining workers stop after their current file.
        """
        if self.token.cancelled:
            raise PoolError("run cancelled before the worker pool started")

        total = len(paths) if isinstance(paths, Sized) else None
        dispatcher = _Dispatcher(paths, self.token)
        first_error: BaseException | None = None

        LOG.debug("starting %d blame workers", self.width)
        with ThreadPoolExecutor(max_workers=self.width, thread_name_prefix="blame-worker") as ex:
            futs = []
            try:
                for _ in range(self.width):
                    futs.append(ex.submit(self._work, dispatcher, publish, total))
            except RuntimeError as e:
                first_error = e
                self.token.cancel(f"failed to start blame workers: {e}")
            for fut in as_completed(futs):
                err = fut.exception()
                if err is not None and first_error is None:
                    first_error = err
                    LOG.debug("worker failed, cancelling run: %s", err)
                    self.token.cancel(f"worker failed: {err}")

        if first_error is not None:
            raise PoolError(str(first_error)) from first_error
        return dispatcher.dispatched
