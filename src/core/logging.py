"""Logging setup shared by the CLI and the tool server."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED = False


def configure_logging(level: str | int = "INFO") -> None:
    """Route log records to stderr; stdout carries the tool protocol."""
    global _CONFIGURED
    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else level.upper())
    if _CONFIGURED:
        return
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    # uvicorn's access log is noise for a single-page preview
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _CONFIGURED = True


__all__ = ["configure_logging"]
