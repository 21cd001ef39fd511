"""
Centralized logging utilities for pureident.

Provides standardized logging functions for common scenarios so that every
module formats connection, protocol and data events the same way.
"""

import logging
from typing import Any


def log_protocol_event(
    logger: logging.Logger, event_type: str, details: str = ""
) -> None:
    """Log protocol events with consistent format."""
    detail_str = f": {details}" if details else ""
    logger.info(f"[PROTOCOL] {event_type}{detail_str}")


def log_parsing_warning(logger: logging.Logger, operation: str, reason: str) -> None:
    """Log parsing warnings with consistent format."""
    logger.warning(f"{operation}: {reason}")


def log_debug_operation(
    logger: logging.Logger, operation: str, details: Any = None
) -> None:
    """Log debug information for operations."""
    if details is not None:
        logger.debug(f"{operation}: {details}")
    else:
        logger.debug(f"{operation}")


def log_connection_event(
    logger: logging.Logger, event_type: str, host: str = "", port: int = 0
) -> None:
    """Log connection events with consistent format."""
    if host and port:
        logger.info(f"[CONNECTION] {event_type} - {host}:{port}")
    else:
        logger.info(f"[CONNECTION] {event_type}")


def log_data_processing(
    logger: logging.Logger, operation: str, data_info: str = ""
) -> None:
    """Log data processing operations with consistent format."""
    info_str = f" - {data_info}" if data_info else ""
    logger.debug(f"[DATA] {operation}{info_str}")


__all__ = [
    "log_protocol_event",
    "log_parsing_warning",
    "log_debug_operation",
    "log_connection_event",
    "log_data_processing",
]
