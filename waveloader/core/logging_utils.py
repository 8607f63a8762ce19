#!/usr/bin/env python3
"""Centralized logging utilities with consistent formatting."""

import logging
import sys
from typing import Any

# Global configuration
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.INFO
_CONFIGURED_LOGGERS: set[str] = set()


def setup_logger(
    name: str,
    level: int | None = None,
    format_string: str | None = None,
    stream: Any = None,
) -> logging.Logger:
    """Set up a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        format_string: Custom format string (optional)
        stream: Output stream (default: sys.stdout)

    Returns:
        Configured logger instance

    Example:
        >>> from waveloader.core.logging_utils import setup_logger
        >>> logger = setup_logger(__name__)
        >>> logger.info("Loader created")
    """
    logger = logging.getLogger(name)

    # Only configure once per logger name
    if name in _CONFIGURED_LOGGERS:
        return logger

    if level is None:
        level = _DEFAULT_LEVEL
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        formatter = logging.Formatter(
            format_string or _LOG_FORMAT,
            datefmt=_LOG_DATE_FORMAT,
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Prevent propagation to root logger (avoid duplicate logs)
    logger.propagate = False

    _CONFIGURED_LOGGERS.add(name)

    return logger


def log_event(
    logger: logging.Logger,
    event_name: str,
    data: dict[str, Any] | None = None,
):
    """Log a structured event.

    Args:
        logger: Logger instance
        event_name: Event name (e.g., 'progress_set', 'recycled')
        data: Optional event data

    Example:
        >>> log_event(logger, "progress_set", {"value": 80, "duration_ms": 0})
    """
    data_str = ""
    if data:
        data_str = " " + " ".join(f"{k}={v}" for k, v in data.items())
    logger.info(f"[EVENT] {event_name}{data_str}")
