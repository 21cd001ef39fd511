"""
pureident package init.
Exports the Ident protocol (RFC 1413) client API.
"""

import argparse
import datetime
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .client import (
    CancellationToken,
    request,
    request_for_socket,
    request_for_stream,
    request_sync,
)
from .exceptions import (
    ConfigurationError,
    ErrorKind,
    IdentError,
    ParseError,
    ProtocolError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseLengthError,
    TransportError,
)
from .options import RequestOptions
from .protocol.constants import IDENT_PORT
from .protocol.response import ErrorResponse, Response, UserIdResponse
from .protocol.trace_recorder import TraceRecorder

__version__ = "0.1.0"

# Exit statuses of the command line client
EXIT_USERID = 0
EXIT_ERROR_REPLY = 1
EXIT_FAILURE = 2

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JSONFormatter(logging.Formatter):
    """JSON formatter with structured logging support."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        connection_id = getattr(record, "connection_id", None)
        if connection_id:
            log_entry["connection_id"] = connection_id

        # Add extra structured data
        extra = getattr(record, "pureident_extra", {})
        if extra:
            log_entry.update(extra)

        # Handle exceptions
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
            context = getattr(record.exc_info[1], "context", None)
            if context:
                log_entry["context"] = context

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "WARNING") -> None:
    """
    Setup basic logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    use_json = os.environ.get("PUREIDENT_LOG_JSON", "false").lower() == "true"
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    if use_json:
        handler = logging.StreamHandler()
        formatter = JSONFormatter()
        handler.setFormatter(formatter)
        root.addHandler(handler)
    else:
        logging.basicConfig(level=getattr(logging, level.upper()))


def _response_fields(response: Response) -> Dict[str, Any]:
    data = response.to_dict()
    if isinstance(response, UserIdResponse) and isinstance(response.userid, bytes):
        try:
            data["userid"] = response.decode_userid(errors="replace")
        except LookupError:
            # No Python codec for the declared charset; show the octets
            data["userid"] = response.userid.hex()
    return data


def _format_response(response: Response, as_json: bool) -> str:
    data = _response_fields(response)
    if as_json:
        return json.dumps(data, ensure_ascii=False)
    return " : ".join(
        [f"{data['server_port']}, {data['client_port']}"]
        + [str(data[key]) for key in ("status", "opsys", "charset", "userid", "error") if key in data]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point: query an identd server and print the reply."""
    parser = argparse.ArgumentParser(
        description="pureident - Ident protocol (RFC 1413) client"
    )
    parser.add_argument("host", help="Host running identd")
    parser.add_argument(
        "server_port", type=int, help="Port of the connection on the identd host"
    )
    parser.add_argument(
        "client_port", type=int, help="Port of the connection on this host"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=IDENT_PORT,
        help=f"identd port (default {IDENT_PORT})",
    )
    parser.add_argument(
        "--no-abort",
        action="store_true",
        help="Keep reading replies longer than 1000 bytes without an end of line",
    )
    parser.add_argument("--timeout", type=float, help="Give up after this many seconds")
    parser.add_argument("--bind", help="Local address to connect from")
    parser.add_argument(
        "--check-ports",
        action="store_true",
        help="Reject replies whose port pair differs from the query",
    )
    parser.add_argument("--json", action="store_true", help="Print the reply as JSON")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("PUREIDENT_LOG_LEVEL", "WARNING"),
        help="Logging level (default WARNING)",
    )
    args = parser.parse_args(argv)
    # argparse does not check choices against a default from the environment
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid PUREIDENT_LOG_LEVEL: {args.log_level!r}")

    setup_logging(args.log_level)
    cli_logger = logging.getLogger(__name__)

    try:
        response = request_sync(
            address=args.host,
            port=args.port,
            server_port=args.server_port,
            client_port=args.client_port,
            abort=not args.no_abort,
            timeout=args.timeout,
            local_address=args.bind,
            check_ports=args.check_ports,
        )
    except IdentError as e:
        cli_logger.error(f"Ident query failed: {e}")
        print(f"{e.kind.value}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(_format_response(response, args.json))
    return EXIT_ERROR_REPLY if response.is_error else EXIT_USERID


if __name__ == "__main__":
    sys.exit(main())


__all__ = [
    "request",
    "request_sync",
    "request_for_socket",
    "request_for_stream",
    "CancellationToken",
    "RequestOptions",
    "Response",
    "UserIdResponse",
    "ErrorResponse",
    "TraceRecorder",
    "ErrorKind",
    "IdentError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "ResponseLengthError",
    "ParseError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "setup_logging",
    "main",
]
