"""
Blame aggregation pipeline: worker pool -> bounded result queue -> aggregator -> finalizer.

The calling thread drives the worker pool. A single aggregator thread owns all
counters and reads the result queue until the end-of-stream marker, which is
only enqueued after every worker has stopped, so no published result is lost
even when the run is cancelled part way through.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from .aggregate import END_OF_RESULTS, Aggregator
from .blame import BlameInvoker
from .cancel import CancelToken
from .errors import PoolError
from .finalize import finalize
from .models import AnalysisOptions, AnalysisResult, FileBlameResult
from .pool import Invoke, WorkerPool

LOG = logging.getLogger(__name__)


def run_pipeline(
    repo: Path,
    paths: Iterable[str],
    options: AnalysisOptions,
    *,
    token: CancelToken | None = None,
    on_progress: Callable[[int, Optional[int]], None] | None = None,
    invoke: Invoke | None = None,
) -> AnalysisResult:
    started = time.monotonic()
    token = token if token is not None else CancelToken()
    files = list(paths)
    if invoke is None:
        invoke = BlameInvoker(repo, options)

    aggregator = Aggregator(options.focus_author, verbose=options.verbose)
    results: queue.Queue[FileBlameResult | None] = queue.Queue(maxsize=options.queue_size)
    aggregation_errors: list[Exception] = []

    def consume() -> None:
        try:
            aggregator.consume(results)
        except Exception as e:
            aggregation_errors.append(e)
            token.cancel(f"aggregation failed: {e}")
            # Keep draining so blocked workers can finish and the pool can stop.
            while results.get() is not END_OF_RESULTS:
                pass

    consumer = threading.Thread(target=consume, name="blame-aggregator", daemon=True)
    consumer.start()

    width = max(1, min(options.workers, len(files)))
    pool = WorkerPool(invoke, width, token, on_progress=on_progress)
    dispatched = 0
    try:
        dispatched = pool.run(files, results.put)
    finally:
        results.put(END_OF_RESULTS)
        consumer.join()

    if aggregation_errors:
        raise PoolError(f"aggregation failed: {aggregation_errors[0]}") from aggregation_errors[0]

    complete = not token.cancelled
    if not complete:
        LOG.info("run cancelled after dispatching %d of %d files", dispatched, len(files))

    return finalize(
        aggregator.state,
        options,
        total_files=len(files),
        complete=complete,
        repository=str(repo),
        processing_time=time.monotonic() - started,
    )
