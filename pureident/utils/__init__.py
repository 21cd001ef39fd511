"""
Utilities package for pureident.

Contains common utility functions used across the pureident codebase.
"""

from .logging_utils import (
    log_connection_event,
    log_data_processing,
    log_debug_operation,
    log_parsing_warning,
    log_protocol_event,
)

__all__ = [
    "log_protocol_event",
    "log_parsing_warning",
    "log_debug_operation",
    "log_connection_event",
    "log_data_processing",
]
