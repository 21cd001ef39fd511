"""Accumulation buffer for an Ident reply.

Collects reply chunks until the CR LF terminator shows up. Each feed only
scans the newly appended tail plus one byte of overlap, so a CR at the end of
one chunk and an LF at the start of the next are still matched.
"""

import logging
from typing import Optional

from ..utils.logging_utils import log_data_processing
from .constants import ABORT_CONNECTION_LENGTH, EOL

logger = logging.getLogger(__name__)


class ReplyBuffer:
    def __init__(self, abort_length: int = ABORT_CONNECTION_LENGTH) -> None:
        self._data = bytearray()
        self._scanned: int = 0
        self.abort_length = abort_length

    def __len__(self) -> int:
        return len(self._data)

    def feed(self, chunk: bytes) -> Optional[bytes]:
        """Append ``chunk`` and return the reply line once the EOL is seen.

        The returned line excludes the terminator; anything after it is
        ignored since identd answers exactly one line per connection.
        """
        self._data += chunk
        start = max(self._scanned - (len(EOL) - 1), 0)
        index = self._data.find(EOL, start)
        if index != -1:
            log_data_processing(
                logger, "EOL found", f"offset {index}, {len(self._data)} bytes buffered"
            )
            return bytes(self._data[:index])
        self._scanned = len(self._data)
        return None

    def exceeds_limit(self) -> bool:
        """True once more than ``abort_length`` unterminated bytes are held."""
        return len(self._data) > self.abort_length
