import pytest

from pureident.protocol.constants import CHARSETS, ERROR_TOKENS, OPSYS
from pureident.protocol.validators import (
    is_valid_charset,
    is_valid_error_token,
    is_valid_opsys,
    is_valid_userid,
)

FIXTURE_OPSYS = frozenset({"UNIX", "VMS"})
FIXTURE_CHARSETS = frozenset({"US-ASCII", "UTF-8"})
FIXTURE_ERRORS = frozenset({"NO-USER", "HIDDEN-USER"})


class TestOpsys:
    def test_other_always_accepted(self):
        assert is_valid_opsys("OTHER")
        assert is_valid_opsys("OTHER", known=frozenset())

    def test_known_opsys(self):
        assert is_valid_opsys("UNIX")
        assert "UNIX" in OPSYS

    def test_fixture_table(self):
        assert is_valid_opsys("VMS", known=FIXTURE_OPSYS)
        assert not is_valid_opsys("MSDOS", known=FIXTURE_OPSYS)

    @pytest.mark.parametrize("opsys", ["", "unix", "UNIX ", "WINDOWS-NT-X"])
    def test_unknown_opsys(self, opsys):
        assert not is_valid_opsys(opsys)


class TestCharset:
    def test_known_charset(self):
        assert is_valid_charset("US-ASCII")
        assert "UTF-8" in CHARSETS

    def test_fixture_table(self):
        assert is_valid_charset("UTF-8", known=FIXTURE_CHARSETS)
        assert not is_valid_charset("KOI8-R", known=FIXTURE_CHARSETS)

    def test_unknown_charset(self):
        assert not is_valid_charset("KLINGON")
        assert not is_valid_charset("")


class TestUserId:
    def test_bounds(self):
        assert not is_valid_userid("")
        assert is_valid_userid("a")
        assert is_valid_userid("a" * 512)
        assert not is_valid_userid("a" * 513)

    def test_accepts_raw_bytes(self):
        assert is_valid_userid(b"\xc3\xa9")
        assert not is_valid_userid(b"")


class TestErrorToken:
    @pytest.mark.parametrize("token", sorted(ERROR_TOKENS))
    def test_well_known_tokens(self, token):
        assert is_valid_error_token(token)

    def test_fixture_table(self):
        assert is_valid_error_token("HIDDEN-USER", known=FIXTURE_ERRORS)
        assert not is_valid_error_token("INVALID-PORT", known=FIXTURE_ERRORS)

    def test_extension_token_bounds(self):
        assert not is_valid_error_token("X")
        assert is_valid_error_token("XY")
        assert is_valid_error_token("X" + "a" * 63)
        assert not is_valid_error_token("X" + "a" * 64)

    @pytest.mark.parametrize("token", ["", "NO-SUCH-THING", "xlowercase", "Y-CUSTOM"])
    def test_rejected_tokens(self, token):
        assert not is_valid_error_token(token)
