"""
RESP protocol constants
"""

from __future__ import annotations

import enum
from typing import Final

from respwire._utils import b


class DataType(enum.IntEnum):
    """
    Markers used by redis server to signal
    the type of data being sent.

    See:

    - `RESP protocol spec <https://redis.io/docs/develop/reference/protocol-spec>`__
    """

    SIMPLE_STRING = ord(b"+")
    ERROR = ord(b"-")
    INT = ord(b":")
    BULK_STRING = ord(b"$")
    ARRAY = ord(b"*")


SYM_STAR: Final[bytes] = b("*")
SYM_DOLLAR: Final[bytes] = b("$")
SYM_CRLF: Final[bytes] = b("\r\n")
SYM_CR: Final[bytes] = b("\r")
SYM_LF: Final[bytes] = b("\n")
SYM_EMPTY: Final[bytes] = b("")

#: Declared length of a null bulk string
NULL_BULK_LENGTH: Final[int] = -1
