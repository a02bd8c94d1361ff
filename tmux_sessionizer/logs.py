"""Logging setup: a daily log file plus console output on stderr."""

from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE_NAME = "tmux-sessionizer.log"
LEVEL_ENV_VAR = "TMUX_SESSIONIZER_LOG"
BACKUP_COUNT = 7

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_STDERR_FORMAT = "%(levelname)s: %(message)s"


def _resolve_level(debug: bool) -> int:
    override = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    if override:
        level = logging.getLevelName(override)
        if isinstance(level, int):
            return level
    return logging.DEBUG if debug else logging.INFO


def setup_logging(debug: bool, log_directory: Path | None) -> Path | None:
    """Configure the root logger and return the log file path, if any.

    The file handler records everything at the chosen level. On stderr a
    rich handler shows the same records when debugging; otherwise only
    warnings and errors are printed.
    """

    level = _resolve_level(debug)
    if debug:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        console_handler.setLevel(level)
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(_STDERR_FORMAT))
        console_handler.setLevel(logging.WARNING)
    handlers: list[logging.Handler] = [console_handler]

    log_file: Path | None = None
    file_error: OSError | None = None
    if log_directory is not None:
        try:
            log_directory.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                log_directory / LOG_FILE_NAME,
                when="midnight",
                backupCount=BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            file_error = exc
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            file_handler.setLevel(level)
            handlers.append(file_handler)
            log_file = log_directory / LOG_FILE_NAME

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logger = logging.getLogger(__name__)
    if file_error is not None:
        logger.warning("Could not open log file in %s, logging to stderr only: %s", log_directory, file_error)
    else:
        logger.debug("Logging to %s at level %s", log_file, logging.getLevelName(level))
    return log_file


__all__ = ["LOG_FILE_NAME", "LEVEL_ENV_VAR", "setup_logging"]
