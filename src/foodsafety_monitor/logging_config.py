"""Structured logging configuration for the food-safety monitor."""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


ROOT_LOGGER_NAME = "foodsafety_monitor"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    stream: Optional[TextIO] = None,
    format_string: Optional[str] = None,
) -> None:
    """Configure logging for the food-safety monitor.

    Diagnostics go to stderr by default so that JSON written to stdout
    is never mixed with log lines.

    Args:
        log_file: Optional path to a log file
        level: Logging level (default: INFO)
        console: Whether to also log to the console stream (default: True)
        stream: Console stream (default: sys.stderr)
        format_string: Custom log format string
    """
    fmt = format_string or DEFAULT_FORMAT
    formatter = logging.Formatter(fmt, datefmt=DEFAULT_DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.propagate = False

    logger.debug("Logging initialized (file=%s)", log_file)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Logger name (typically module or source key)

    Returns:
        Logger instance under the foodsafety_monitor namespace
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
