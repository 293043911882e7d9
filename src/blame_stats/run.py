from __future__ import annotations

import contextlib
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO

from .cancel import CancelToken
from .discovery import discover_files
from .git import validate_repository
from .models import AnalysisOptions, AnalysisResult
from .pipeline import run_pipeline

LOG = logging.getLogger(__name__)


class ProgressPrinter:
    """Prints `Blamed i/n files...` lines to stderr every `step` files and at the end."""

    def __init__(self, *, step: int = 50, stream: TextIO | None = None) -> None:
        self.step = max(1, step)
        self.stream = stream

    def __call__(self, completed: int, total: Optional[int]) -> None:
        if completed % self.step != 0 and completed != total:
            return
        out = self.stream if self.stream is not None else sys.stderr
        if total is None:
            print(f"Blamed {completed} files...", file=out)
        else:
            print(f"Blamed {completed}/{total} files...", file=out)


@contextlib.contextmanager
def cancel_on_signals(token: CancelToken, *, announce: bool = True) -> Iterator[None]:
    """
    Cancel `token` on SIGINT/SIGTERM for the duration of the block. Handlers can
    only be installed from the main thread; elsewhere this is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, _frame: object) -> None:
        if announce and not token.cancelled:
            print("\nReceived interrupt signal, shutting down gracefully...", file=sys.stderr)
        token.cancel(f"signal {signal.Signals(signum).name}")

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, prev in previous.items():
            signal.signal(sig, prev)


def analyze_repository(
    root: Path,
    options: AnalysisOptions,
    *,
    extra_patterns: list[str] | tuple[str, ...] = (),
    token: CancelToken | None = None,
    on_progress: Callable[[int, Optional[int]], None] | None = None,
    announce: Callable[[str], None] | None = None,
) -> AnalysisResult:
    """Validate `root`, list its files and run the blame pipeline over them."""
    repo = validate_repository(root)
    say = announce or (lambda msg: None)

    say(f"Scanning directory: {repo}")
    if options.focus_author:
        say(f"Analyzing contributions by author: {options.focus_author}")

    files = discover_files(repo, extra_patterns)
    say(f"Found {len(files):,} files to analyze")
    if not files:
        LOG.warning("No files found to analyze under %s", repo)

    return run_pipeline(repo, files, options, token=token, on_progress=on_progress)
