"""Logging setup for the TUI and the command line."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from tickit.errors import IoError

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def level_for(name: str | int) -> int:
    """Turn a level name like 'warning' into a logging level."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def verbosity_level(verbose: int, default: str = "warning") -> int:
    """-v is INFO, -vv and up is DEBUG."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return level_for(default)


def setup_logging(
    level: str | int = "warning",
    log_file: str | Path | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route tickit's logs to a file, a stream, or nowhere.

    The TUI owns the terminal, so it passes neither a stream nor (unless
    configured) a file and logging is silenced.
    """
    if log_file:
        path = Path(log_file).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as exc:
            raise IoError(f"Cannot open log file {path}: {exc}") from exc
    elif stream is not None:
        handler = logging.StreamHandler(stream)
    else:
        handler = logging.NullHandler()

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level_for(level), handlers=[handler], force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level_for(level), logging.WARNING))


def setup_cli_logging(verbose: int, default: str = "warning") -> None:
    setup_logging(verbosity_level(verbose, default), stream=sys.stderr)
