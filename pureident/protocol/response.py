"""Structured Ident replies.

A reply is one of exactly two shapes sharing the port pair: ``UserIdResponse``
for ``USERID`` replies and ``ErrorResponse`` for ``ERROR`` replies.
"""

import codecs
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Union

from .constants import STATUS_ERROR, STATUS_USERID

__all__ = ["IdentResponse", "UserIdResponse", "ErrorResponse", "Response"]


@dataclass(frozen=True)
class IdentResponse:
    server_port: int
    client_port: int

    status: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server_port": self.server_port,
            "client_port": self.client_port,
            "status": self.status,
        }

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR


@dataclass(frozen=True)
class UserIdResponse(IdentResponse):
    """USERID reply.

    ``userid`` is a ``str`` when no charset was declared. When the server
    tagged the opsys field with a charset it is the undecoded ``bytes`` of the
    field; use :meth:`decode_userid` or decode it yourself.
    """

    opsys: str
    userid: Union[str, bytes]
    charset: Optional[str] = None

    status: ClassVar[str] = STATUS_USERID

    def decode_userid(self, errors: str = "strict") -> str:
        """Return the user-id as text, decoding with the declared charset.

        Raises:
            LookupError: Python has no codec for the declared charset
        """
        if isinstance(self.userid, str):
            return self.userid
        codec = codecs.lookup(self.charset or "ascii")
        return codec.decode(self.userid, errors)[0]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["opsys"] = self.opsys
        if self.charset is not None:
            data["charset"] = self.charset
        data["userid"] = self.userid
        return data


@dataclass(frozen=True)
class ErrorResponse(IdentResponse):
    """ERROR reply carrying a well-known or ``X``-prefixed error token."""

    error: str

    status: ClassVar[str] = STATUS_ERROR

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["error"] = self.error
        return data


Response = Union[UserIdResponse, ErrorResponse]
