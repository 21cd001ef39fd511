"""Ordered diagnostics trace of one ident exchange."""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

__all__ = [
    "ExchangeEvent",
    "TraceRecorder",
]


@dataclass
class ExchangeEvent:
    ts: float
    kind: str
    details: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"ts": self.ts, "kind": self.kind, **self.details}


class TraceRecorder:
    """Lightweight ordered recorder for the events of one ident exchange.

    Intended for diagnostics and tests. IdentConnection skips recording when
    no recorder is given. Timestamps are relative to recorder creation
    (monotonic start baseline subtracted).
    """

    def __init__(self) -> None:
        self._events: List[ExchangeEvent] = []
        self._start = time.monotonic()

    # Internal -----------------------------------------------------------------
    def _now(self) -> float:
        return time.monotonic() - self._start

    def record(self, kind: str, **details: Any) -> None:
        self._events.append(ExchangeEvent(ts=self._now(), kind=kind, details=details))

    # Public API ---------------------------------------------------------------
    def events(self) -> List[ExchangeEvent]:  # shallow copy
        return list(self._events)

    def kinds(self) -> List[str]:
        return [e.kind for e in self._events]

    def to_json(self, *, indent: Optional[int] = None) -> str:
        return json.dumps(
            [e.to_dict() for e in self._events], indent=indent, sort_keys=True
        )

    # Exchange events ---------------------------------------------------------
    def state(self, old: str, new: str, reason: str) -> None:
        self.record("state", old=old, new=new, reason=reason)

    def sent(self, payload: bytes) -> None:
        self.record("sent", length=len(payload), preview=payload[:32].hex())

    def chunk(self, payload: bytes, buffered: int) -> None:
        self.record(
            "chunk", length=len(payload), buffered=buffered, preview=payload[:32].hex()
        )

    def reply(self, line: bytes) -> None:
        self.record("reply", length=len(line))

    def error(self, message: str) -> None:
        self.record("error", message=message)
