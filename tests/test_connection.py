"""
Tests for IdentConnection.

Runs real exchanges over loopback against the scripted MockIdentdServer:
chunked replies, terminator detection, the abort threshold, transport
failures and cancellation.
"""

import asyncio
import json
import logging

import pytest

from pureident import JSONFormatter
from pureident.exceptions import (
    ErrorKind,
    RequestCancelledError,
    ResponseLengthError,
    TransportError,
)
from pureident.protocol.connection import ConnectionState, IdentConnection
from tests.mocks import TEST_HOST, MockIdentdServer, closed_port

pytestmark = pytest.mark.integration

REQUEST = b"6193, 23\r\n"


def padded_reply(total_length: int) -> bytes:
    """A valid USERID reply line of exactly ``total_length`` bytes (no EOL)."""
    head = b"6193,23:USERID:"
    tail = b"UNIX:stjohns"
    return head + b" " * (total_length - len(head) - len(tail)) + tail


@pytest.mark.asyncio
async def test_exchange_single_chunk(userid_server):
    connection = IdentConnection(TEST_HOST, userid_server.port)
    line = await connection.exchange(REQUEST)

    assert line == b"6193, 23 : USERID : UNIX : stjohns"
    assert userid_server.requests == [REQUEST]
    assert connection.state == ConnectionState.COMPLETE
    assert connection.bytes_received == len(line) + 2


@pytest.mark.asyncio
async def test_exchange_reassembles_chunks():
    chunks = [b"6195, 23 ", b": ERROR ", b": NO-USER\r", b"\n"]
    async with MockIdentdServer(chunks, chunk_delay=0.02) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        assert await connection.exchange(REQUEST) == b"6195, 23 : ERROR : NO-USER"


@pytest.mark.asyncio
async def test_bytes_after_terminator_are_discarded():
    async with MockIdentdServer([b"1,2:ERROR:NO-USER\r\nsecond line\r\n"]) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        assert await connection.exchange(REQUEST) == b"1,2:ERROR:NO-USER"


@pytest.mark.asyncio
async def test_connection_closed_after_reply():
    async with MockIdentdServer([b"1,2:ERROR:NO-USER\r\n"], hold_open=True) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        await connection.exchange(REQUEST)
        await asyncio.wait_for(server.peer_closed.wait(), timeout=2.0)


@pytest.mark.asyncio
async def test_unterminated_reply_at_limit_is_not_aborted():
    line = padded_reply(1000)
    async with MockIdentdServer([line, b"\r\n"], chunk_delay=0.05) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        assert await connection.exchange(REQUEST) == line
        assert connection.state == ConnectionState.COMPLETE


@pytest.mark.asyncio
async def test_unterminated_reply_over_limit_is_aborted():
    async with MockIdentdServer([b"x" * 1001], hold_open=True) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        with pytest.raises(ResponseLengthError) as exc_info:
            await connection.exchange(REQUEST)

        assert exc_info.value.kind is ErrorKind.INVALID_RESPONSE_LENGTH
        assert exc_info.value.get_context("length") == 1001
        assert connection.state == ConnectionState.ABORTED
        await asyncio.wait_for(server.peer_closed.wait(), timeout=2.0)


@pytest.mark.asyncio
async def test_abort_disabled_keeps_reading():
    line = padded_reply(1500)
    async with MockIdentdServer([line, b"\r\n"], chunk_delay=0.05) as server:
        connection = IdentConnection(TEST_HOST, server.port, abort=False)
        assert await connection.exchange(REQUEST) == line


@pytest.mark.asyncio
async def test_premature_close_is_transport_error():
    async with MockIdentdServer([b"1,2:ERROR:NO-"]) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        with pytest.raises(TransportError) as exc_info:
            await connection.exchange(REQUEST)

        assert exc_info.value.kind is ErrorKind.TRANSPORT_ERROR
        assert exc_info.value.get_context("buffered") == 13
        assert connection.state == ConnectionState.TRANSPORT_FAILED


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error():
    connection = IdentConnection(TEST_HOST, closed_port())
    with pytest.raises(TransportError) as exc_info:
        await connection.exchange(REQUEST)

    assert isinstance(exc_info.value.original_exception, OSError)
    assert isinstance(exc_info.value.__cause__, OSError)
    assert exc_info.value.get_context("operation") == "connect"
    assert connection.state == ConnectionState.TRANSPORT_FAILED


@pytest.mark.asyncio
async def test_cancel_while_awaiting_reply():
    async with MockIdentdServer(hold_open=True) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        task = asyncio.create_task(connection.exchange(REQUEST))
        await asyncio.wait_for(server.request_received.wait(), timeout=2.0)

        connection.cancel()

        with pytest.raises(RequestCancelledError) as exc_info:
            await task
        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert connection.state == ConnectionState.CANCELLED
        await asyncio.wait_for(server.peer_closed.wait(), timeout=2.0)


@pytest.mark.asyncio
async def test_cancel_before_exchange():
    connection = IdentConnection(TEST_HOST, closed_port())
    connection.cancel()
    with pytest.raises(RequestCancelledError):
        await connection.exchange(REQUEST)
    assert connection.state == ConnectionState.CANCELLED


@pytest.mark.asyncio
async def test_task_cancellation_closes_socket():
    async with MockIdentdServer(hold_open=True) as server:
        connection = IdentConnection(TEST_HOST, server.port)
        task = asyncio.create_task(connection.exchange(REQUEST))
        await asyncio.wait_for(server.request_received.wait(), timeout=2.0)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert connection.state == ConnectionState.CANCELLED
        await asyncio.wait_for(server.peer_closed.wait(), timeout=2.0)


@pytest.mark.asyncio
async def test_connection_is_single_use(userid_server):
    connection = IdentConnection(TEST_HOST, userid_server.port)
    await connection.exchange(REQUEST)
    with pytest.raises(RuntimeError):
        await connection.exchange(REQUEST)


@pytest.mark.asyncio
async def test_cancel_after_completion_is_noop(userid_server):
    connection = IdentConnection(TEST_HOST, userid_server.port)
    await connection.exchange(REQUEST)
    connection.cancel()
    assert not connection.cancelled
    assert connection.state == ConnectionState.COMPLETE


@pytest.mark.asyncio
async def test_state_transitions_are_recorded(userid_server, recorder):
    connection = IdentConnection(TEST_HOST, userid_server.port, recorder=recorder)
    await connection.exchange(REQUEST)

    states = [e.details["new"] for e in recorder.events() if e.kind == "state"]
    assert states == ["CONNECTING", "AWAITING_REPLY", "COMPLETE"]
    assert recorder.kinds().count("sent") == 1
    assert "reply" in recorder.kinds()
    assert json.loads(recorder.to_json())[0]["kind"] == "state"


@pytest.mark.asyncio
async def test_bind_local_address(userid_server):
    connection = IdentConnection(
        TEST_HOST, userid_server.port, local_address=TEST_HOST
    )
    assert await connection.exchange(REQUEST)


def test_connection_info():
    connection = IdentConnection("ident.example.org", connection_id="lookup")
    info = connection.get_connection_info()
    assert info["connection_id"] == "lookup"
    assert info["port"] == 113
    assert info["state"] == "IDLE"
    assert info["abort"] is True


@pytest.mark.asyncio
async def test_cancellation_during_close_is_terminal(userid_server):
    connection = IdentConnection(TEST_HOST, userid_server.port)
    closing = asyncio.Event()

    async def stalled_close():
        closing.set()
        await asyncio.sleep(10)

    connection._close = stalled_close
    task = asyncio.create_task(connection.exchange(REQUEST))
    await asyncio.wait_for(closing.wait(), timeout=2.0)

    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert connection.state == ConnectionState.CANCELLED


@pytest.mark.asyncio
async def test_state_changes_carry_structured_fields(userid_server, caplog):
    caplog.set_level(logging.INFO, logger="pureident.protocol.connection")
    connection = IdentConnection(
        TEST_HOST, userid_server.port, connection_id="query-1"
    )
    await connection.exchange(REQUEST)

    records = [r for r in caplog.records if hasattr(r, "pureident_extra")]
    assert [r.pureident_extra["new_state"] for r in records] == [
        "CONNECTING",
        "AWAITING_REPLY",
        "COMPLETE",
    ]
    assert all(r.connection_id == "query-1" for r in records)
    entry = json.loads(JSONFormatter().format(records[-1]))
    assert entry["connection_id"] == "query-1"
    assert entry["old_state"] == "AWAITING_REPLY"
    assert entry["port"] == userid_server.port
