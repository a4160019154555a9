"""Logging configuration for polychat.

Library modules log through ``logging.getLogger(__name__)``, which places them
under the ``polychat`` logger. Nothing is printed until an application calls
``configure_logging`` once at startup.

Usage:
    from polychat.logging import configure_logging

    configure_logging("DEBUG")
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("polychat")


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> None:
    """Attach a Rich handler to the package logger.

    Safe to call more than once; the previous handler is replaced.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level
        console: Console to render to (defaults to stderr)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
