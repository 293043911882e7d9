from __future__ import annotations

import dataclasses
import datetime as dt
import os

from .errors import ConfigError

SORT_KEYS = ("lines", "name", "files")
AUTHOR_FORMATS = ("name", "email", "name-email")


def default_concurrency() -> int:
    return max(1, (os.cpu_count() or 1) * 2)


@dataclasses.dataclass(frozen=True)
class AnalysisOptions:
    concurrency: int = 0  # 0 = 2 * cpu count
    focus_author: str = ""
    include_authors: tuple[str, ...] = ()
    exclude_authors: tuple[str, ...] = ()
    since: str = ""
    until: str = ""
    min_lines: int = 1
    sort_by: str = "lines"
    max_results: int = 0  # 0 = no limit
    author_format: str = "name"
    verbose: bool = False
    result_buffer: int = 0  # 0 = 4 * workers

    def __post_init__(self) -> None:
        if self.concurrency < 0:
            raise ConfigError(f"concurrency must be >= 0, got {self.concurrency}")
        if self.min_lines < 0:
            raise ConfigError(f"min_lines must be >= 0, got {self.min_lines}")
        if self.max_results < 0:
            raise ConfigError(f"max_results must be >= 0, got {self.max_results}")
        if self.result_buffer < 0:
            raise ConfigError(f"result_buffer must be >= 0, got {self.result_buffer}")
        if self.sort_by not in SORT_KEYS:
            raise ConfigError(f"sort_by must be one of {', '.join(SORT_KEYS)}, got {self.sort_by!r}")
        if self.author_format not in AUTHOR_FORMATS:
            raise ConfigError(f"author_format must be one of {', '.join(AUTHOR_FORMATS)}, got {self.author_format!r}")

    @property
    def workers(self) -> int:
        return self.concurrency if self.concurrency > 0 else default_concurrency()

    @property
    def queue_size(self) -> int:
        return self.result_buffer if self.result_buffer > 0 else 4 * self.workers


@dataclasses.dataclass(frozen=True)
class FileBlameResult:
    path: str
    authors: tuple[str, ...] = ()
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclasses.dataclass
class AggregateState:
    total_lines: int = 0
    files_processed: int = 0
    files_failed: int = 0
    files_cancelled: int = 0
    author_lines: dict[str, int] = dataclasses.field(default_factory=dict)
    author_files: dict[str, set[str]] = dataclasses.field(default_factory=dict)
    focus_file_lines: dict[str, int] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class AuthorStats:
    name: str
    line_count: int
    file_count: int
    percentage: float


@dataclasses.dataclass(frozen=True)
class FileContribution:
    path: str
    line_count: int


@dataclasses.dataclass(frozen=True)
class AnalysisResult:
    authors: tuple[AuthorStats, ...]
    contributions: tuple[FileContribution, ...]
    total_lines: int
    files_processed: int
    total_files: int
    files_failed: int
    complete: bool
    repository: str = ""
    focus_author: str = ""
    processing_time: float = 0.0  # seconds
    generated_at: dt.datetime | None = None
    files_cancelled: int = 0  # in flight when the run was cancelled

    @property
    def focus_lines(self) -> int:
        return sum(c.line_count for c in self.contributions)
