"""Logging utilities for the model registry.

This module provides standardized logging functionality for registry operations.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict

# Type for log callback functions
LogCallback = Callable[[int, str, Dict[str, Any]], None]

LOGGER_NAME = "translation_model_registry"


class LogLevel(int, Enum):
    """Log levels for the registry."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for registry logging."""

    MODEL_REGISTRY = "model_registry"
    ARCHIVE_EXTRACT = "archive_extract"
    PACKAGE_INSTALL = "package_install"
    PACKAGE_REMOVE = "package_remove"
    PACKAGE_SCAN = "package_scan"
    CATALOG_FETCH = "catalog_fetch"
    RECONCILE = "reconcile"


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the package logger.

    Args:
        name: Module name or short component name

    Returns:
        Logger instance
    """
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


_logger = get_logger("events")


def _log(
    callback: LogCallback,
    level: LogLevel,
    event: LogEvent,
    data: Dict[str, Any],
) -> None:
    """Log an event with the provided callback.

    Args:
        callback: Function to call with the log data
        level: Severity level
        event: Event type
        data: Dictionary of event data
    """
    try:
        callback(level, event.value, data)
    except Exception as e:
        # Fallback to standard logging if callback fails
        logging.error(
            f"Logging callback failed with error: {e}. Original log: "
            f"level={level}, event={event}, data={data}"
        )


def _default_callback(level: int, event: str, data: Dict[str, Any]) -> None:
    message = data.pop("message", event)
    _logger.log(level, message, extra={"event": event, "data": data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level registry event."""
    _log(_default_callback, LogLevel.DEBUG, event, {"message": message, **data})


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level registry event."""
    _log(_default_callback, LogLevel.INFO, event, {"message": message, **data})


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level registry event."""
    _log(_default_callback, LogLevel.WARNING, event, {"message": message, **data})


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error-level registry event."""
    _log(_default_callback, LogLevel.ERROR, event, {"message": message, **data})
