"""Ident protocol (RFC 1413) wire handling: request, reply grammar and connection."""

from .buffer import ReplyBuffer
from .connection import ConnectionState, IdentConnection
from .parser import ReplyParser, parse_response
from .request import build_request
from .response import ErrorResponse, IdentResponse, Response, UserIdResponse
from .trace_recorder import TraceRecorder

__all__ = [
    "build_request",
    "parse_response",
    "ReplyParser",
    "ReplyBuffer",
    "IdentConnection",
    "ConnectionState",
    "IdentResponse",
    "UserIdResponse",
    "ErrorResponse",
    "Response",
    "TraceRecorder",
]
