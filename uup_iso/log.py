"""Logging setup for the uup_iso command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route uup_iso log records to a rich handler on stderr.

    Args:
        level: Logging level name.
        console: Optional console to render to (defaults to stderr).
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO; the retry loop already reports failures
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
