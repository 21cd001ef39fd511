"""
Centralized error handling utilities for the ident exchange.

Maps socket failures raised by asyncio streams onto ``TransportError`` so
callers see one error type per failure class, with the original ``OSError``
kept as the cause.
"""

import logging
from typing import Any, Dict, NoReturn, Optional, Type

from ..exceptions import ProtocolError, TransportError

logger = logging.getLogger(__name__)


class safe_socket_operation:
    """
    Async context manager for socket operations.

    Catches OSError (refused, reset, unreachable, broken pipe); logs it and
    raises TransportError with the original message. Use around connect,
    read and write.
    """

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.context = context or {}

    async def __aenter__(self) -> "safe_socket_operation":
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Any, exc_tb: Any
    ) -> None:
        if exc_type is not None and issubclass(exc_type, OSError):
            logger.error(
                f"Socket operation '{self.operation}' failed: {exc_val}", exc_info=True
            )
            raise TransportError(
                f"{self.operation} failed: {exc_val}",
                context=dict(self.context, operation=self.operation),
                original_exception=exc_val,
            ) from exc_val
        return None


def raise_transport_error(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Raise a TransportError with optional wrapped exception."""
    if exc:
        logger.error(f"{message}: {exc}", exc_info=True)
        raise TransportError(message, context=context, original_exception=exc) from exc
    logger.error(message)
    raise TransportError(message, context=context)


def raise_protocol_error(
    error_class: Type[ProtocolError],
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Log and raise a ProtocolError subclass."""
    if context:
        logger.error(f"Protocol violation: {message} (Context: {context})")
    else:
        logger.error(f"Protocol violation: {message}")
    raise error_class(message, context=context)
