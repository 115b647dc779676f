"""Logging setup for the command line.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def verbosity_to_level(verbosity: int) -> int:
    """Map a ``-v`` count to a log level.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG
    """
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int, console: Console | None = None) -> None:
    """Route ``release_engine`` log records through rich at the given verbosity."""
    level = verbosity_to_level(verbosity)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbosity >= 2,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("release_engine")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
