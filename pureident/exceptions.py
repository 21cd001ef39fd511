"""Exceptions for pureident with contextual information."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Identifiers for every failure a request can surface."""

    # Configuration (raised before any I/O)
    UNDEFINED_LOCAL_ADDRESS = "UNDEFINED_LOCAL_ADDRESS"
    UNDEFINED_SERVER_PORT = "UNDEFINED_SERVER_PORT"
    UNDEFINED_LOCAL_PORT = "UNDEFINED_LOCAL_PORT"
    INVALID_OPTION = "INVALID_OPTION"

    # Reply grammar
    INVALID_RESPONSE_LENGTH = "INVALID_RESPONSE_LENGTH"
    INVALID_PORT_PAIR = "INVALID_PORT_PAIR"
    INVALID_STATUS_RESPONSE = "INVALID_STATUS_RESPONSE"
    INVALID_OPSYS_RESPONSE = "INVALID_OPSYS_RESPONSE"
    INVALID_CHARSET_RESPONSE = "INVALID_CHARSET_RESPONSE"
    INVALID_USERID_LENGTH = "INVALID_USERID_LENGTH"
    INVALID_ERROR_TOKEN = "INVALID_ERROR_TOKEN"
    PORT_MISMATCH = "PORT_MISMATCH"

    # Exchange
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"


class IdentError(Exception):
    """Base error for pureident with contextual information."""

    default_kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        kind: Optional[ErrorKind] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        """
        Initialize a pureident error.

        Args:
            message: Error message
            kind: Error identifier; defaults to the class's ``default_kind``
            context: Optional context information (host, port, field, length, etc.)
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.kind = kind if kind is not None else self.default_kind
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        """Get string representation with context."""
        base_msg = super().__str__()
        if self.context:
            context_items = []
            for key, value in self.context.items():
                if isinstance(value, str) and len(value) > 50:
                    # Truncate long values
                    value = value[:47] + "..."
                context_items.append(f"{key}={value}")
            context_str = ", ".join(context_items)
            return f"{base_msg} (Context: {context_str})"
        return base_msg

    def __repr__(self) -> str:
        """Get repr with kind and context details."""
        base_repr = super().__repr__()
        if self.context:
            return f"{base_repr} (kind={self.kind.value}, context={self.context!r})"
        return f"{base_repr} (kind={self.kind.value})"

    def add_context(self, key: str, value: Any) -> None:
        """
        Add context information to the exception.

        Args:
            key: Context key
            value: Context value
        """
        self.context[key] = value

    def get_context(self, key: str, default: Any = None) -> Any:
        """
        Get context information from the exception.

        Args:
            key: Context key
            default: Default value if key not found

        Returns:
            Context value or default
        """
        return self.context.get(key, default)


class ConfigurationError(IdentError):
    """Missing or invalid request option, detected before any network I/O."""

    default_kind = ErrorKind.INVALID_OPTION


class TransportError(IdentError):
    """Socket-level failure (refused, reset, unreachable, premature close)."""

    default_kind = ErrorKind.TRANSPORT_ERROR


class ProtocolError(IdentError):
    """The identd peer sent something the protocol does not allow."""

    default_kind = ErrorKind.INVALID_RESPONSE_LENGTH


class ResponseLengthError(ProtocolError):
    """Reply exceeded the abort threshold without an end of line."""

    default_kind = ErrorKind.INVALID_RESPONSE_LENGTH


class PortMismatchError(ProtocolError):
    """Reply port pair differs from the queried one."""

    default_kind = ErrorKind.PORT_MISMATCH


class ParseError(ProtocolError):
    """Reply line violates the reply grammar."""

    default_kind = ErrorKind.INVALID_STATUS_RESPONSE


class InvalidPortPairError(ParseError):
    default_kind = ErrorKind.INVALID_PORT_PAIR


class InvalidStatusError(ParseError):
    default_kind = ErrorKind.INVALID_STATUS_RESPONSE


class InvalidOpsysError(ParseError):
    default_kind = ErrorKind.INVALID_OPSYS_RESPONSE


class InvalidCharsetError(ParseError):
    default_kind = ErrorKind.INVALID_CHARSET_RESPONSE


class InvalidUserIdError(ParseError):
    default_kind = ErrorKind.INVALID_USERID_LENGTH


class InvalidErrorTokenError(ParseError):
    default_kind = ErrorKind.INVALID_ERROR_TOKEN


class RequestTimeoutError(IdentError):
    """The optional wall-clock timeout expired before a reply arrived."""

    default_kind = ErrorKind.TIMEOUT


class RequestCancelledError(IdentError):
    """The request was cancelled and its connection forcibly closed."""

    default_kind = ErrorKind.CANCELLED
