from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import Iterable

from .cancel import CancelToken
from .errors import BlameCancelledError, BlameFailedError, BlameLaunchError
from .git import blame_args
from .identity import AuthorFilter, format_identity
from .models import AnalysisOptions, FileBlameResult

LOG = logging.getLogger(__name__)

MAX_STDERR_CHARS = 50_000


def parse_line_porcelain(
    lines: Iterable[str],
    *,
    author_format: str = "name",
    author_filter: AuthorFilter | None = None,
) -> list[str]:
    """
    Extract one author identity per attributed line from `git blame --line-porcelain`.

    Every record repeats the full commit header (`author`, `author-mail`, ...)
    and ends with the source line itself, prefixed by a TAB. The identity is
    emitted when that TAB line is reached, so the output has exactly one entry
    per blamed line, in file order. Authors rejected by `author_filter` and
    empty identities are dropped.
    """
    authors: list[str] = []
    name = ""
    mail = ""
    for raw_line in lines:
        line = raw_line.rstrip("\n")
        if line.startswith("\t"):
            identity = format_identity(name, mail, author_format)
            bare_mail = mail.strip().strip("<>")
            if identity and (author_filter is None or author_filter.allows(identity, name, bare_mail)):
                authors.append(identity)
            name = ""
            mail = ""
            continue
        if line.startswith("author "):
            name = line[len("author ") :]
        elif line.startswith("author-mail "):
            mail = line[len("author-mail ") :]
    return authors


class BlameInvoker:
    """Runs `git blame` for one file at a time inside `repo`."""

    def __init__(self, repo: Path, options: AnalysisOptions, *, git: str = "git") -> None:
        self.repo = repo
        self.options = options
        self.git = git
        self.author_filter = AuthorFilter.from_lists(options.include_authors, options.exclude_authors)

    def command(self, path: str) -> list[str]:
        return [self.git, *blame_args(path, since=self.options.since, until=self.options.until)]

    def __call__(self, path: str, token: CancelToken) -> FileBlameResult:
        if token.cancelled:
            return FileBlameResult(path=path, error=BlameCancelledError(path))

        cmd = self.command(path)
        LOG.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(self.repo),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise BlameLaunchError(f"failed to start git blame for {path}: {e}") from e

        stderr_chunks: list[str] = []
        stderr_chars = 0

        def drain_stderr() -> None:
            nonlocal stderr_chars
            if proc.stderr is None:
                return
            while True:
                chunk = proc.stderr.read(8192)
                if not chunk:
                    return
                if stderr_chars >= MAX_STDERR_CHARS:
                    continue
                take = chunk[: MAX_STDERR_CHARS - stderr_chars]
                stderr_chunks.append(take)
                stderr_chars += len(take)

        stderr_thread = threading.Thread(target=drain_stderr, name=f"blame-stderr:{path}", daemon=True)
        stderr_thread.start()

        try:
            with token.on_cancel(proc.kill):
                assert proc.stdout is not None
                authors = parse_line_porcelain(
                    proc.stdout,
                    author_format=self.options.author_format,
                    author_filter=self.author_filter if self.author_filter.active else None,
                )
                code = proc.wait()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            stderr_thread.join()
            if proc.stdout is not None:
                proc.stdout.close()
            if proc.stderr is not None:
                proc.stderr.close()

        if code != 0:
            if token.cancelled:
                return FileBlameResult(path=path, error=BlameCancelledError(path))
            stderr = "".join(stderr_chunks).strip()[:500]
            return FileBlameResult(path=path, error=BlameFailedError(path, code, stderr))
        return FileBlameResult(path=path, authors=tuple(authors))
