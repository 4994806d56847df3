"""Logging setup for the CLI: stdlib logging rendered through Rich on stderr."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = ["WARNING", "INFO", "DEBUG"]


def level_for_verbosity(verbose: int, default: str = "WARNING") -> str:
    """Map a repeated -v count onto a level name, starting from ``default``."""
    if verbose <= 0:
        return default.upper()
    start = _LEVELS.index(default.upper()) if default.upper() in _LEVELS else 0
    return _LEVELS[min(start + verbose, len(_LEVELS) - 1)]


def configure_logging(level: str = "WARNING") -> None:
    """Install a single RichHandler on the root logger."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
