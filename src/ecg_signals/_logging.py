"""Logging configuration for the ecg-signals package.

The package logs through a single named logger. On import it gets a stdout handler
so format plugins and viewers see load failures and canonicalization results
without configuring anything; callers can raise or lower the level and attach a
rotating log file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

_formatter = logging.Formatter("%(name)s | %(levelname)s | %(message)s")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _configure_default_logging() -> logging.Logger:
    """Attach the console handler once and return the package logger."""
    logger = logging.getLogger(__package__)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        logger.propagate = False
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(_formatter)
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)

    return logger


logger = _configure_default_logging()


def set_log_level(log_level: LogLevel) -> None:
    """Change the level of the package logger and every handler attached to it.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.

    Example:
        >>> set_log_level("WARNING")
        >>> logger.info("Resampled rhythm")  # suppressed
    """
    numeric_level: int = int(getattr(logging, log_level))
    if logger.level == numeric_level:
        return
    logger.setLevel(numeric_level)
    for handler in logger.handlers:
        handler.setLevel(numeric_level)


def set_log_file(log_file: Path, log_level: LogLevel = "DEBUG") -> None:
    """Write package log records to a rotating file.

    An existing file handler is closed and replaced, console handlers are kept.

    Args:
        log_file: Path to the log file. Parent directories are created.
        log_level: Level for the file handler.

    Example:
        >>> set_log_file(Path("logs/conversion.log"), log_level="INFO")
    """
    numeric_level: int = int(getattr(logging, log_level))
    log_file.parent.mkdir(parents=True, exist_ok=True)

    for h in list(logger.handlers):
        if isinstance(h, logging.FileHandler):
            h.close()
            logger.removeHandler(h)

    file_handler = RotatingFileHandler(log_file, maxBytes=100_000_000, backupCount=3)
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(_formatter)
    logger.addHandler(file_handler)
