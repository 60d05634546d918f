"""File-backed logging configuration.

The TUI owns the terminal, so log records never go to stderr while a session
is running; they are appended to a log file instead.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME, DEFAULT_LOG_LEVEL

LOG_FILENAME = "irexplorer.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def default_log_path() -> Path:
    """Per-user log file location."""
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str | None = None, log_file: str | Path | None = None) -> Path:
    """Route root logging to ``log_file`` at ``level`` and return the path used."""
    path = Path(log_file) if log_file is not None else default_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    numeric_level = getattr(logging, (level or DEFAULT_LOG_LEVEL).upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        filename=str(path),
        filemode="a",
        format=LOG_FORMAT,
        force=True,
    )
    return path
