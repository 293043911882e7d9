"""
Exception types used across blame-stats.

Setup and launch failures are raised; per-file blame failures are carried on
``FileBlameResult.error`` and never abort a run.
"""

from __future__ import annotations


class BlameStatsError(Exception):
    """Base class for all blame-stats specific errors."""


class RepositoryError(BlameStatsError):
    """Raised when the analysis root is missing or not a git repository."""


class ConfigError(BlameStatsError):
    """Raised when configuration values or files are invalid."""


class BlameLaunchError(BlameStatsError):
    """Raised when the git executable cannot be started at all."""


class PoolError(BlameStatsError):
    """Raised when the worker pool cannot complete its run."""


class BlameFailedError(BlameStatsError):
    """git blame exited non-zero for a single file."""

    def __init__(self, path: str, returncode: int, stderr: str = "") -> None:
        self.path = path
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"git blame exited {returncode} for {path}{detail}")


class BlameCancelledError(BlameStatsError):
    """git blame for a single file was killed by cancellation."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"git blame cancelled for {path}")
