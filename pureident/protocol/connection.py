"""
IdentConnection: one request/reply exchange with an identd server.

Owns the TCP stream for a single query: connect, write the request, read the
reply in bounded chunks until CR LF, then close. Oversized unterminated
replies are aborted once they pass the abort threshold.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..exceptions import (
    RequestCancelledError,
    ResponseLengthError,
    TransportError,
)
from ..utils.logging_utils import log_connection_event, log_protocol_event
from .buffer import ReplyBuffer
from .constants import ABORT_CONNECTION_LENGTH, IDENT_PORT, READ_BUFFER_LENGTH
from .errors import raise_protocol_error, raise_transport_error, safe_socket_operation
from .trace_recorder import TraceRecorder

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of a single ident exchange."""

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    AWAITING_REPLY = "AWAITING_REPLY"
    COMPLETE = "COMPLETE"
    ABORTED = "ABORTED"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_STATES = frozenset(
    {
        ConnectionState.COMPLETE,
        ConnectionState.ABORTED,
        ConnectionState.TRANSPORT_FAILED,
        ConnectionState.CANCELLED,
    }
)


class IdentConnection:
    """
    Single-use connection to an identd server.

    ``exchange()`` may be called once; a new query needs a new instance.
    ``cancel()`` may be called from any state and forcibly closes the socket.
    """

    def __init__(
        self,
        host: str,
        port: int = IDENT_PORT,
        abort: bool = True,
        local_address: Optional[str] = None,
        read_size: int = READ_BUFFER_LENGTH,
        abort_length: int = ABORT_CONNECTION_LENGTH,
        recorder: Optional[TraceRecorder] = None,
        connection_id: Optional[str] = None,
    ):
        """
        Initialize an ident connection.

        Args:
            host: identd host to query
            port: identd port (default 113)
            abort: Abort replies longer than ``abort_length`` without an EOL
            local_address: Local address to bind before connecting (multihomed hosts)
            read_size: Maximum bytes requested per read
            abort_length: Unterminated byte count tolerated before aborting
            recorder: Optional trace recorder for diagnostics
            connection_id: Optional identifier used in log lines
        """
        self.host = host
        self.port = port
        self.abort = abort
        self.local_address = local_address
        self.read_size = read_size
        self.abort_length = abort_length
        self.recorder = recorder
        self.connection_id = connection_id or f"ident_{id(self)}"

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

        self.state = ConnectionState.IDLE
        self.created_at = time.time()
        self.bytes_received = 0
        self._connect_task: Optional["asyncio.Future[Any]"] = None
        self._cancelled = False

    @property
    def context(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def exchange(self, request: bytes) -> bytes:
        """
        Send ``request`` and return the reply line without its terminator.

        Raises:
            TransportError: Connect, read or write failed, or the peer closed early
            ResponseLengthError: Reply passed the abort threshold without an EOL
            RequestCancelledError: ``cancel()`` was called
            RuntimeError: The connection was already used
        """
        if self.state != ConnectionState.IDLE:
            raise RuntimeError(
                f"Connection {self.connection_id} already used (state {self.state.value})"
            )

        try:
            await self._open()
            await self._send(request)
            line = await self._receive()
        except RequestCancelledError:
            self._finish(ConnectionState.CANCELLED, "cancelled")
            raise
        except ResponseLengthError as e:
            self._finish(ConnectionState.ABORTED, str(e))
            raise
        except TransportError as e:
            if self._cancelled:
                self._finish(ConnectionState.CANCELLED, "cancelled")
                raise RequestCancelledError(
                    "Request cancelled", context=self.context
                ) from e
            self._finish(ConnectionState.TRANSPORT_FAILED, str(e))
            raise
        except asyncio.CancelledError:
            self._finish(ConnectionState.CANCELLED, "task cancelled")
            raise

        try:
            await self._close()
        except asyncio.CancelledError:
            self._finish(ConnectionState.CANCELLED, "task cancelled while closing")
            raise
        self._set_state(ConnectionState.COMPLETE, "reply received")
        return line

    def cancel(self) -> None:
        """Forcibly close the in-flight connection.

        The pending ``exchange()`` resolves with RequestCancelledError.
        """
        if self.state in TERMINAL_STATES or self._cancelled:
            return
        self._cancelled = True
        log_connection_event(logger, "cancel requested", self.host, self.port)
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        self._abort_transport()

    async def _open(self) -> None:
        self._check_cancelled()
        self._set_state(ConnectionState.CONNECTING, "starting connection")
        local_addr: Optional[Tuple[str, int]] = None
        if self.local_address:
            local_addr = (self.local_address, 0)

        self._connect_task = asyncio.ensure_future(
            asyncio.open_connection(self.host, self.port, local_addr=local_addr)
        )
        try:
            async with safe_socket_operation("connect", self.context):
                self.reader, self.writer = await self._connect_task
        except asyncio.CancelledError:
            if self._cancelled:
                raise RequestCancelledError(
                    "Request cancelled while connecting", context=self.context
                ) from None
            raise
        finally:
            self._connect_task = None

        self._check_cancelled()
        log_connection_event(logger, "established", self.host, self.port)
        self._set_state(ConnectionState.AWAITING_REPLY, "connection established")

    async def _send(self, request: bytes) -> None:
        assert self.writer is not None
        async with safe_socket_operation("send", self.context):
            self.writer.write(request)
            await self.writer.drain()
        log_protocol_event(logger, "Request sent", request.decode("ascii").rstrip())
        if self.recorder is not None:
            self.recorder.sent(request)

    async def _receive(self) -> bytes:
        assert self.reader is not None
        buffer = ReplyBuffer(self.abort_length)
        while True:
            async with safe_socket_operation("read", self.context):
                chunk = await self.reader.read(self.read_size)
            if not chunk:
                self._check_cancelled()
                raise_transport_error(
                    "Connection closed before end of line",
                    context=dict(self.context, buffered=len(buffer)),
                )

            self.bytes_received += len(chunk)
            if self.recorder is not None:
                self.recorder.chunk(chunk, len(buffer) + len(chunk))

            line = buffer.feed(chunk)
            if line is not None:
                log_protocol_event(logger, "Reply received", f"{len(line)} bytes")
                if self.recorder is not None:
                    self.recorder.reply(line)
                return line

            if self.abort and buffer.exceeds_limit():
                raise_protocol_error(
                    ResponseLengthError,
                    "Invalid response length",
                    dict(self.context, length=len(buffer), limit=self.abort_length),
                )

    async def _close(self) -> None:
        """Close the stream after a complete reply; late bytes are discarded."""
        if self.writer is None:
            return
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            # Reply already read; teardown errors are not reported
            logger.debug(f"Error while closing connection {self.connection_id}: {e}")
        log_connection_event(logger, "closed", self.host, self.port)

    def _abort_transport(self) -> None:
        if self.writer is not None:
            self.writer.transport.abort()

    def _check_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError("Request cancelled", context=self.context)

    def _finish(self, state: ConnectionState, reason: str) -> None:
        self._abort_transport()
        if self.recorder is not None:
            self.recorder.error(reason)
        self._set_state(state, reason)

    def _set_state(self, new_state: ConnectionState, reason: str) -> None:
        """Set connection state with logging."""
        old_state = self.state
        self.state = new_state
        if self.recorder is not None:
            self.recorder.state(old_state.value, new_state.value, reason)
        logger.info(
            f"Connection {self.connection_id} state: {old_state.value} -> {new_state.value} ({reason})",
            extra={
                "connection_id": self.connection_id,
                "pureident_extra": {
                    "host": self.host,
                    "port": self.port,
                    "old_state": old_state.value,
                    "new_state": new_state.value,
                },
            },
        )

    def get_connection_info(self) -> Dict[str, Any]:
        """Get connection information for monitoring/debugging."""
        return {
            "connection_id": self.connection_id,
            "host": self.host,
            "port": self.port,
            "state": self.state.value,
            "abort": self.abort,
            "local_address": self.local_address,
            "bytes_received": self.bytes_received,
            "created_at": self.created_at,
        }
