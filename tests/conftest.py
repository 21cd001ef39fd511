import logging

import pytest
import pytest_asyncio

from pureident.protocol.trace_recorder import TraceRecorder
from tests.mocks import MockIdentdServer


@pytest.fixture
def recorder():
    """Fixture providing a fresh TraceRecorder."""
    return TraceRecorder()


@pytest.fixture
def preserve_root_logger():
    """Restore root logger handlers and level changed by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest_asyncio.fixture
async def userid_server():
    """Mock identd answering the canonical USERID example in one chunk."""
    async with MockIdentdServer([b"6193, 23 : USERID : UNIX : stjohns\r\n"]) as server:
        yield server


@pytest_asyncio.fixture
async def error_server():
    """Mock identd answering the canonical ERROR example in one chunk."""
    async with MockIdentdServer([b"6195, 23 : ERROR : NO-USER\r\n"]) as server:
        yield server
