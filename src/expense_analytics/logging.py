"""
Logging setup for expense analytics.

Log records go to stderr so that report output on stdout (CSV, JSON) can
be piped cleanly. Console output is colored when stderr is a terminal; a
rotating log file can be enabled alongside it.

Every module logs through ``get_logger(component)``, which places it
under the ``expense_analytics`` logger configured here.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Optional, TextIO


ROOT_LOGGER_NAME = "expense_analytics"

RESET = "\033[0m"

# ANSI color per level name
LEVEL_COLORS = {
    "DEBUG": "\033[2;36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;41;37m",
}


class ColoredFormatter(logging.Formatter):
    """
    Console formatter.

    Shortens ``expense_analytics.store`` to ``store`` and colors the level
    name when writing to a terminal.
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(fmt, datefmt)
        stream = stream if stream is not None else sys.stderr
        self.use_colors = bool(getattr(stream, "isatty", None) and stream.isatty())

    def format(self, record: logging.LogRecord) -> str:
        levelname, name = record.levelname, record.name

        if name.startswith(ROOT_LOGGER_NAME + "."):
            record.name = name[len(ROOT_LOGGER_NAME) + 1:]
        if self.use_colors and levelname in LEVEL_COLORS:
            record.levelname = f"{LEVEL_COLORS[levelname]}{levelname}{RESET}"

        try:
            return super().format(record)
        finally:
            record.levelname, record.name = levelname, name


@dataclass
class LogConfig:
    level: str = "WARNING"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    date_format: str = "%H:%M:%S"

    console_enabled: bool = True
    console_colors: bool = True

    file_enabled: bool = False
    file_path: Optional[str] = None
    file_max_bytes: int = 5 * 1024 * 1024
    file_backup_count: int = 3


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(config: Optional[LogConfig] = None) -> logging.Logger:
    """
    Configure the ``expense_analytics`` logger and return it.

    Calling it again replaces the handlers from the previous call.
    """
    config = config or LogConfig()
    level = _level(config.level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config.console_enabled:
        console = logging.StreamHandler(sys.stderr)
        if config.console_colors:
            console.setFormatter(
                ColoredFormatter(config.format, config.date_format, stream=sys.stderr)
            )
        else:
            console.setFormatter(logging.Formatter(config.format, config.date_format))
        logger.addHandler(console)

    if config.file_enabled and config.file_path:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        # Files always get the full logger name and a full timestamp
        rotating.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s [%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(rotating)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Logger for a package component, e.g. ``get_logger("loader")``."""
    if component == ROOT_LOGGER_NAME or component.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(component)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


@contextmanager
def log_execution_time(
    logger: logging.Logger,
    operation: str,
    level: int = logging.INFO,
):
    """
    Log the start, end and duration of ``operation``.

    Failures are logged at ERROR with the elapsed time and re-raised.
    """
    started = perf_counter()
    logger.log(level, f"Starting: {operation}")
    try:
        yield
    except Exception as e:
        logger.error(f"Failed: {operation} after {perf_counter() - started:.3f}s: {e}")
        raise
    logger.log(level, f"Completed: {operation} in {perf_counter() - started:.3f}s")
