"""Logging setup for the recovery engine."""

import getpass
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "recovery"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _file_handler(
    log_file: str, max_bytes: int, backup_count: int, rotation_enabled: bool
) -> logging.Handler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    if rotation_enabled:
        return logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    return logging.FileHandler(log_file, encoding="utf-8")


def setup_logging(
    log_file: Optional[str],
    log_level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    rotation_enabled: bool = True,
) -> logging.Logger:
    """Configure the shared recovery logger.

    Reports go to stdout, so the console handler writes to stderr. Calling
    this again replaces the handlers of the previous call.

    Args:
        log_file: Path to log file (None logs to the console only)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        max_bytes: Max size of log file before rotation (in bytes)
        backup_count: Number of rotated files to keep
        rotation_enabled: Whether to enable log rotation

    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        f"%(asctime)s - %(name)s - %(levelname)s - [{_current_user()}] - %(message)s",
        datefmt=DATE_FORMAT,
    )

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(_file_handler(log_file, max_bytes, backup_count, rotation_enabled))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the shared recovery logger."""
    return logging.getLogger(LOGGER_NAME)
