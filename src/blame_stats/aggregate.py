from __future__ import annotations

import logging
import queue

from .errors import BlameCancelledError
from .models import AggregateState, FileBlameResult

LOG = logging.getLogger(__name__)

# Marks the end of the result stream; put on the queue once every worker has stopped.
END_OF_RESULTS = None


class Aggregator:
    """
    Folds per-file blame results into one `AggregateState`.

    The aggregator is the only code that touches its state, so it is driven
    from a single thread (`consume`) and never needs a lock. It is not
    cancellable: it keeps reading until the end-of-stream marker so that every
    published result is counted exactly once.
    """

    def __init__(self, focus_author: str = "", *, verbose: bool = False) -> None:
        self.focus_author = focus_author
        self.verbose = verbose
        self.state = AggregateState()

    def add(self, result: FileBlameResult) -> None:
        st = self.state
        if isinstance(result.error, BlameCancelledError):
            st.files_cancelled += 1
            LOG.debug("Cancelled while blaming %s", result.path)
            return
        if result.error is not None:
            st.files_failed += 1
            if self.verbose:
                LOG.warning("Error processing %s: %s", result.path, result.error)
            else:
                LOG.debug("Error processing %s: %s", result.path, result.error)
            return

        st.files_processed += 1
        st.total_lines += len(result.authors)
        for author in result.authors:
            st.author_lines[author] = st.author_lines.get(author, 0) + 1
            files = st.author_files.get(author)
            if files is None:
                files = st.author_files[author] = set()
            files.add(result.path)
            if self.focus_author and author == self.focus_author:
                st.focus_file_lines[result.path] = st.focus_file_lines.get(result.path, 0) + 1

    def consume(self, results: "queue.Queue[FileBlameResult | None]") -> AggregateState:
        while True:
            item = results.get()
            if item is END_OF_RESULTS:
                return self.state
            self.add(item)
