"""
Logging helpers for blame-stats.

Diagnostics go to stderr through the standard logging module so that stdout
only ever carries the rendered result.
"""

from __future__ import annotations

import logging


def configure_logging(verbosity: int, *, quiet: bool = False) -> None:
    """
    Configure the root logger based on a verbosity count.

    quiet           -> ERROR
    verbosity == 0  -> WARNING
    verbosity == 1  -> INFO
    verbosity >= 2  -> DEBUG
    """

    if quiet:
        level = logging.ERROR
    elif verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
