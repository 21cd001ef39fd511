"""
Ident query entry points.

``request()`` validates the options, runs one exchange through an
IdentConnection and parses the reply. Each call owns its own socket and
buffer, so any number of calls may run concurrently.
"""

import asyncio
import logging
import socket
from typing import Any, Callable, List, Mapping, Optional, Union

from .exceptions import PortMismatchError, RequestTimeoutError
from .options import RequestOptions
from .protocol.connection import IdentConnection
from .protocol.errors import raise_protocol_error
from .protocol.parser import parse_response
from .protocol.request import build_request
from .protocol.response import Response
from .protocol.trace_recorder import TraceRecorder
from .utils.logging_utils import log_protocol_event

logger = logging.getLogger(__name__)

OptionsLike = Union[RequestOptions, Mapping[str, Any], None]


class CancellationToken:
    """Cancels in-flight requests from another task.

    Pass the token to ``request()``; calling ``cancel()`` forcibly closes the
    request's connection and the request raises RequestCancelledError.
    Must be used from the event loop thread running the request.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for callback in list(self._callbacks):
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        if self._cancelled:
            callback()
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove


async def request(
    options: OptionsLike = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    recorder: Optional[TraceRecorder] = None,
    **kwargs: Any,
) -> Response:
    """
    Query an identd server about one TCP connection.

    Args:
        options: RequestOptions or a mapping with the same keys; keyword
            arguments override or replace it
        cancel_token: Optional token that aborts the request when cancelled
        recorder: Optional trace recorder for the exchange

    Returns:
        UserIdResponse or ErrorResponse

    Raises:
        ConfigurationError: Missing or invalid options (no I/O attempted)
        TransportError: Socket failure or premature close
        ProtocolError: Invalid reply (length, status, opsys, charset, user-id, error token)
        RequestTimeoutError: ``timeout`` elapsed
        RequestCancelledError: ``cancel_token`` was cancelled
    """
    opts = RequestOptions.coerce(options, **kwargs)
    log_protocol_event(
        logger,
        "Ident query",
        f"{opts.server_port}, {opts.client_port} via {opts.address}:{opts.port}",
    )

    connection = IdentConnection(
        opts.address,  # type: ignore[arg-type]
        opts.port,
        abort=opts.abort,
        local_address=opts.local_address,
        recorder=recorder,
    )
    unregister = cancel_token.add_callback(connection.cancel) if cancel_token else None
    try:
        exchange = connection.exchange(
            build_request(opts.server_port, opts.client_port)  # type: ignore[arg-type]
        )
        if opts.timeout is None:
            line = await exchange
        else:
            try:
                line = await asyncio.wait_for(exchange, timeout=opts.timeout)
            except asyncio.TimeoutError as e:
                logger.error(
                    f"Ident request to {opts.address}:{opts.port} timed out after {opts.timeout}s"
                )
                raise RequestTimeoutError(
                    "Ident request timed out",
                    context={
                        "host": opts.address,
                        "port": opts.port,
                        "timeout": opts.timeout,
                    },
                ) from e
    finally:
        if unregister is not None:
            unregister()

    response = parse_response(line)
    if opts.check_ports and (response.server_port, response.client_port) != (
        opts.server_port,
        opts.client_port,
    ):
        raise_protocol_error(
            PortMismatchError,
            "Reply port pair does not match the query",
            {
                "expected": f"{opts.server_port},{opts.client_port}",
                "received": f"{response.server_port},{response.client_port}",
            },
        )
    return response


def request_sync(
    options: OptionsLike = None,
    *,
    recorder: Optional[TraceRecorder] = None,
    **kwargs: Any,
) -> Response:
    """Blocking variant of ``request()`` for code without an event loop."""
    return asyncio.run(request(options, recorder=recorder, **kwargs))


async def request_for_socket(sock: socket.socket, **kwargs: Any) -> Response:
    """
    Ask the peer's identd who owns the other end of a connected socket.

    The query is bound to the socket's local address so multihomed hosts ask
    from the interface the peer actually sees.
    """
    peer_host, peer_port = sock.getpeername()[:2]
    local_host, local_port = sock.getsockname()[:2]
    kwargs.setdefault("local_address", local_host)
    return await request(
        address=peer_host, server_port=peer_port, client_port=local_port, **kwargs
    )


async def request_for_stream(writer: asyncio.StreamWriter, **kwargs: Any) -> Response:
    """Same as ``request_for_socket`` for a stream accepted by asyncio.start_server."""
    peer_host, peer_port = writer.get_extra_info("peername")[:2]
    local_host, local_port = writer.get_extra_info("sockname")[:2]
    kwargs.setdefault("local_address", local_host)
    return await request(
        address=peer_host, server_port=peer_port, client_port=local_port, **kwargs
    )
