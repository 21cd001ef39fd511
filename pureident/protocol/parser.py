"""Reply grammar for the Ident protocol (RFC 1413).

    <reply-text>  ::= <error-reply> | <ident-reply>
    <port-pair>   ::= <integer> "," <integer>
    <error-reply> ::= <port-pair> ":" "ERROR" ":" <error-type>
    <ident-reply> ::= <port-pair> ":" "USERID" ":" <opsys-field> ":" <user-id>
    <opsys-field> ::= <opsys> [ "," <charset> ]
    <user-id>     ::= <octet-string>  ; 512 character limit

Whitespace around the port pair, status, opsys and charset is insignificant.
Whitespace inside the user-id, including right after the colon, is part of
the identifier and is kept.
"""

import logging
from typing import AbstractSet, List, Optional, Tuple

from ..exceptions import (
    InvalidCharsetError,
    InvalidErrorTokenError,
    InvalidOpsysError,
    InvalidPortPairError,
    InvalidStatusError,
    InvalidUserIdError,
    ParseError,
)
from ..utils.logging_utils import log_debug_operation, log_parsing_warning
from .constants import (
    CHARSETS,
    COLON,
    COMMA,
    DEFAULT_CODEC,
    ERROR_TOKENS,
    OPSYS,
    STATUS_ERROR,
    STATUS_USERID,
)
from .response import ErrorResponse, Response, UserIdResponse
from .validators import (
    is_valid_charset,
    is_valid_error_token,
    is_valid_opsys,
    is_valid_userid,
)

logger = logging.getLogger(__name__)

# port-pair, status, opsys-field / error-type, user-id
MAX_SEGMENTS = 4


def default_decode(data: bytes) -> str:
    return data.decode(DEFAULT_CODEC, errors="replace")


def split_reply(line: bytes) -> List[bytes]:
    """Split on the first three colons; the user-id keeps any later ones."""
    return line.split(COLON, MAX_SEGMENTS - 1)


def parse_port_pair(segment: bytes) -> Tuple[int, int]:
    parts = default_decode(segment).split(COMMA)
    if len(parts) != 2:
        raise InvalidPortPairError(
            "Malformed port pair", context={"port_pair": default_decode(segment)}
        )
    ports = []
    for part in parts:
        text = part.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidPortPairError(
                "Port is not a decimal integer", context={"port": part}
            )
        try:
            ports.append(int(text))
        except ValueError as e:
            # More digits than int() accepts from a string
            raise InvalidPortPairError(
                "Port is not a decimal integer", context={"port": part}
            ) from e
    return ports[0], ports[1]


class ReplyParser:
    """Turns one reply line (terminator stripped) into a Response.

    The lookup tables default to the assigned-number lists and may be
    replaced for tests or for servers with site-specific tokens.
    """

    def __init__(
        self,
        opsys: AbstractSet[str] = OPSYS,
        charsets: AbstractSet[str] = CHARSETS,
        error_tokens: AbstractSet[str] = ERROR_TOKENS,
    ) -> None:
        self.opsys = opsys
        self.charsets = charsets
        self.error_tokens = error_tokens

    def parse(self, line: bytes) -> Response:
        try:
            return self._parse(line)
        except ParseError as e:
            log_parsing_warning(logger, "Rejected ident reply", str(e))
            raise

    def _parse(self, line: bytes) -> Response:
        segments = split_reply(line)
        server_port, client_port = parse_port_pair(segments[0])

        status = default_decode(segments[1]).strip() if len(segments) > 1 else ""
        field = default_decode(segments[2]).strip() if len(segments) > 2 else ""

        if status == STATUS_USERID:
            userid_segment = segments[3] if len(segments) > 3 else None
            return self._parse_userid(
                server_port, client_port, field, userid_segment
            )
        if status == STATUS_ERROR:
            if not is_valid_error_token(field, self.error_tokens):
                raise InvalidErrorTokenError(
                    "Invalid error token", context={"error": field}
                )
            log_debug_operation(logger, "Parsed ERROR reply", field)
            return ErrorResponse(server_port, client_port, error=field)

        raise InvalidStatusError("Invalid reply status", context={"status": status})

    def _parse_userid(
        self,
        server_port: int,
        client_port: int,
        opsys_field: str,
        userid_segment: Optional[bytes],
    ) -> UserIdResponse:
        opsys, sep, charset_part = opsys_field.partition(COMMA)
        opsys = opsys.strip()
        if not is_valid_opsys(opsys, self.opsys):
            raise InvalidOpsysError("Invalid opsys", context={"opsys": opsys})

        if sep:
            charset = charset_part.strip()
            if not is_valid_charset(charset, self.charsets):
                raise InvalidCharsetError(
                    "Invalid charset", context={"charset": charset}
                )
            raw = userid_segment if userid_segment is not None else b""
            if not is_valid_userid(raw):
                raise InvalidUserIdError(
                    "Invalid user-id length", context={"length": len(raw)}
                )
            # Decoding in a non-default charset is left to the caller
            log_debug_operation(
                logger, "Parsed USERID reply", f"{opsys},{charset} (raw user-id)"
            )
            return UserIdResponse(
                server_port,
                client_port,
                opsys=opsys,
                userid=raw,
                charset=charset,
            )

        try:
            userid = (userid_segment or b"").decode(DEFAULT_CODEC)
        except UnicodeDecodeError as e:
            raise InvalidUserIdError(
                "User-id is not US-ASCII and no charset was declared",
                context={"offset": e.start},
            ) from e
        if not is_valid_userid(userid):
            raise InvalidUserIdError(
                "Invalid user-id length", context={"length": len(userid)}
            )
        log_debug_operation(logger, "Parsed USERID reply", opsys)
        return UserIdResponse(server_port, client_port, opsys=opsys, userid=userid)


_default_parser = ReplyParser()


def parse_response(line: bytes) -> Response:
    """Parse a reply line with the default lookup tables."""
    return _default_parser.parse(line)


__all__ = [
    "ReplyParser",
    "parse_response",
    "parse_port_pair",
    "split_reply",
    "default_decode",
]
