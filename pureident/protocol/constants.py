"""Ident protocol constants and lookup tables (RFC 1413, RFC 1340).

The opsys and charset tables mirror the "SYSTEM NAMES" and "CHARACTER SETS"
lists of the Assigned Numbers RFC referenced by RFC 1413. Charset names that
contain a colon are omitted since a colon can never survive the reply split.
"""

from typing import FrozenSet

# Line terminator (RFC 1413: octal 015 012)
EOL = b"\r\n"
# Field separators
COLON = b":"
COMMA = ","

# Well-known identd/auth port
IDENT_PORT = 113
# Clients may abort after this many characters without an EOL (RFC 1413)
ABORT_CONNECTION_LENGTH = 1000
# Replies are short; one read of this size normally holds the whole line
READ_BUFFER_LENGTH = 256
# Codec for every field except a charset-tagged user-id (US-ASCII)
DEFAULT_CODEC = "ascii"

# Reply status values
STATUS_USERID = "USERID"
STATUS_ERROR = "ERROR"

# "OTHER" marks an unformatted identifier and is always accepted
OPSYS_OTHER = "OTHER"

# user-id is an octet-string with a 512 character limit
USERID_MIN_LENGTH = 1
USERID_MAX_LENGTH = 512
# error-token ::= "X" 1*63<token-characters>
ERROR_TOKEN_PREFIX = "X"
ERROR_TOKEN_MIN_LENGTH = 2
ERROR_TOKEN_MAX_LENGTH = 64

ERROR_TOKENS: FrozenSet[str] = frozenset(
    {
        "INVALID-PORT",
        "NO-USER",
        "HIDDEN-USER",
        "UNKNOWN-ERROR",
    }
)

OPSYS: FrozenSet[str] = frozenset(
    {
        "AEGIS",
        "AIX-PS/2",
        "AIX/370",
        "APOLLO",
        "BS-2000",
        "CEDAR",
        "CGW",
        "CHORUS",
        "CHRYSALIS",
        "CMOS",
        "CMS",
        "COS",
        "CPIX",
        "CTOS",
        "CTSS",
        "DCN",
        "DDNOS",
        "DOMAIN",
        "DOS",
        "EDX",
        "ELF",
        "EMBOS",
        "EMMOS",
        "EPOS",
        "FOONEX",
        "FUZZ",
        "GCOS",
        "GPOS",
        "HDOS",
        "IMAGEN",
        "IMPRESS",
        "INTERCOM",
        "INTERLISP",
        "IOS",
        "IRIX",
        "ISI-68020",
        "ITS",
        "LISP",
        "LISPM",
        "LOCUS",
        "MACOS",
        "MINOS",
        "MOS",
        "MPE/IX",
        "MPE/V",
        "MPE5",
        "MSDOS",
        "MULTICS",
        "MUSIC",
        "MUSIC/SP",
        "MVS",
        "MVS/SP",
        "NEXUS",
        "NMS",
        "NONSTOP",
        "NOS-2",
        "NTOS",
        "OS/2",
        "OS/DDP",
        "OS4",
        "OS86",
        "OSX",
        "PCDOS",
        "PERQ/OS",
        "PLI",
        "PRIMOS",
        "PSDOS/MIT",
        "RMX/RDOS",
        "ROS",
        "RSX11M",
        "SATOPS",
        "SCO-XENIX/386",
        "SCS",
        "SIMP",
        "SUN",
        "SUN-OS-3.5",
        "SUN-OS-4.0",
        "SWIFT",
        "TAC",
        "TANDEM",
        "TENEX",
        "TOPS10",
        "TOPS20",
        "TOS",
        "TP3010",
        "TRSDOS",
        "ULTRIX",
        "UNIX",
        "UNIX-BSD",
        "UNIX-PC",
        "UNIX-V",
        "UNIX-V.1",
        "UNIX-V.2",
        "UNIX-V.3",
        "UNIX-V1AT",
        "UNKNOWN",
        "UT2D",
        "V",
        "VM",
        "VM/370",
        "VM/CMS",
        "VM/SP",
        "VMS",
        "VMS/EUNICE",
        "VRTX",
        "WAITS",
        "WANG",
        "WIN32",
        "X11R3",
        "XDE",
        "XENIX",
    }
)

CHARSETS: FrozenSet[str] = frozenset(
    {
        "US-ASCII",
        "ANSI_X3.4-1968",
        "ANSI_X3.4-1986",
        "ISO646-US",
        "ASCII",
        "IBM367",
        "cp367",
        "ISO-10646",
        "ISO-10646-UTF-1",
        "UNICODE-1-1",
        "UTF-8",
        "ISO-8859-1",
        "ISO_8859-1",
        "latin1",
        "l1",
        "IBM819",
        "CP819",
        "ISO-8859-2",
        "ISO_8859-2",
        "latin2",
        "ISO-8859-3",
        "ISO_8859-3",
        "latin3",
        "ISO-8859-4",
        "ISO_8859-4",
        "latin4",
        "ISO-8859-5",
        "ISO_8859-5",
        "cyrillic",
        "ISO-8859-6",
        "ISO_8859-6",
        "arabic",
        "ISO-8859-7",
        "ISO_8859-7",
        "greek",
        "ISO-8859-8",
        "ISO_8859-8",
        "hebrew",
        "ISO-8859-9",
        "ISO_8859-9",
        "latin5",
        "ISO-2022-JP",
        "ISO-2022-KR",
        "EUC-JP",
        "EUC-KR",
        "Shift_JIS",
        "MS_Kanji",
        "KOI8-R",
        "JIS_Encoding",
        "Extended_UNIX_Code_Packed_Format_for_Japanese",
        "IBM037",
        "IBM437",
        "IBM500",
        "IBM850",
        "IBM852",
        "IBM855",
        "IBM857",
        "IBM860",
        "IBM861",
        "IBM862",
        "IBM863",
        "IBM864",
        "IBM865",
        "IBM869",
        "IBM1026",
        "EBCDIC-US",
        "hp-roman8",
        "DEC-MCS",
    }
)

__all__ = [
    "EOL",
    "COLON",
    "COMMA",
    "IDENT_PORT",
    "ABORT_CONNECTION_LENGTH",
    "READ_BUFFER_LENGTH",
    "DEFAULT_CODEC",
    "STATUS_USERID",
    "STATUS_ERROR",
    "OPSYS_OTHER",
    "USERID_MIN_LENGTH",
    "USERID_MAX_LENGTH",
    "ERROR_TOKEN_PREFIX",
    "ERROR_TOKEN_MIN_LENGTH",
    "ERROR_TOKEN_MAX_LENGTH",
    "ERROR_TOKENS",
    "OPSYS",
    "CHARSETS",
]
