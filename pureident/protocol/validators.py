"""Predicates over the Ident reply fields.

All functions are pure; the lookup table is a keyword argument so callers
and tests can substitute their own enumeration.
"""

from typing import AbstractSet, Sized

from .constants import (
    CHARSETS,
    ERROR_TOKEN_MAX_LENGTH,
    ERROR_TOKEN_MIN_LENGTH,
    ERROR_TOKEN_PREFIX,
    ERROR_TOKENS,
    OPSYS,
    OPSYS_OTHER,
    USERID_MAX_LENGTH,
    USERID_MIN_LENGTH,
)


def is_valid_opsys(opsys: str, known: AbstractSet[str] = OPSYS) -> bool:
    return opsys == OPSYS_OTHER or opsys in known


def is_valid_charset(charset: str, known: AbstractSet[str] = CHARSETS) -> bool:
    return charset in known


def is_valid_userid(userid: Sized) -> bool:
    """Check the user-id length is within the closed interval [1, 512]."""
    return USERID_MIN_LENGTH <= len(userid) <= USERID_MAX_LENGTH


def is_valid_error_token(token: str, known: AbstractSet[str] = ERROR_TOKENS) -> bool:
    """Accept a well-known error token or an ``X``-prefixed extension token."""
    if token in known:
        return True
    return (
        ERROR_TOKEN_MIN_LENGTH <= len(token) <= ERROR_TOKEN_MAX_LENGTH
        and token.startswith(ERROR_TOKEN_PREFIX)
    )


__all__ = [
    "is_valid_opsys",
    "is_valid_charset",
    "is_valid_userid",
    "is_valid_error_token",
]
