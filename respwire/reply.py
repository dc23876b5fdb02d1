"""
respwire.reply
--------------
Typed values decoded from RESP replies.

A :data:`Reply` is exactly one of :class:`Status`, :class:`Error`,
:class:`Integer`, :class:`Bulk`, :class:`NullBulk` or :class:`Array`, so
consumers can exhaustively ``match`` on it::

    match reply:
        case Status() | Bulk():
            print(reply.as_string())
        case Integer():
            print(reply.as_int())
        case NullBulk():
            print("(nil)")
        case Array(elements):
            print(len(elements))
        case Error():
            raise RuntimeError(reply.as_string())
"""

from __future__ import annotations

import dataclasses
import re
from typing import Union

from respwire.constants import DataType
from respwire.exceptions import DataError, ReplyTypeError
from respwire.typing import ClassVar, Final, Iterator

INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1
INT32_MIN: Final[int] = -(2**31)
INT32_MAX: Final[int] = 2**31 - 1

#: A signed 64 bit integer has at most 19 digits
_INTEGER_RE = re.compile(rb"-?[0-9]{1,19}")


def _parse_int(payload: bytes, low: int, high: int) -> int:
    if not _INTEGER_RE.fullmatch(payload):
        raise DataError(f"{payload!r} is not a valid integer")
    value = int(payload)
    if not low <= value <= high:
        raise DataError(f"{value} is out of range [{low}, {high}]")
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class Status:
    """Simple one line non-error reply (``+OK``)"""

    payload: bytes

    def as_string(self, encoding: str = "utf-8") -> str:
        return self.payload.decode(encoding, "replace")

    def __repr__(self) -> str:
        return f"Status({self.payload!r})"


@dataclasses.dataclass(frozen=True, slots=True)
class Error:
    """Simple one line error reply (``-ERR ...``)"""

    payload: bytes

    def as_string(self, encoding: str = "utf-8") -> str:
        return self.payload.decode(encoding, "replace")

    @property
    def code(self) -> str:
        """
        The error code prefix (for example ``ERR`` or ``WRONGTYPE``)
        """
        return self.as_string().split(" ", 1)[0]

    def __repr__(self) -> str:
        return f"Error({self.payload!r})"


@dataclasses.dataclass(frozen=True, slots=True)
class Integer:
    """Integer reply, kept as the decimal text sent by the server"""

    payload: bytes

    def as_string(self, encoding: str = "utf-8") -> str:
        return self.payload.decode(encoding, "replace")

    def as_int(self) -> int:
        """
        :raises: :exc:`~respwire.exceptions.DataError` if the payload is not
         a valid signed 64 bit integer
        """
        return _parse_int(self.payload, INT64_MIN, INT64_MAX)

    def as_int32(self) -> int:
        """
        :raises: :exc:`~respwire.exceptions.DataError` if the payload is not
         a valid signed 32 bit integer
        """
        return _parse_int(self.payload, INT32_MIN, INT32_MAX)

    def __int__(self) -> int:
        return self.as_int()

    def __repr__(self) -> str:
        return f"Integer({self.payload!r})"


@dataclasses.dataclass(frozen=True, slots=True)
class Bulk:
    """Binary safe string reply of a declared length (possibly empty)"""

    payload: bytes

    is_null: ClassVar[bool] = False

    def as_bytes(self) -> bytes:
        return self.payload

    def as_string(self, encoding: str = "utf-8") -> str:
        """
        Decode the payload, replacing bytes that are invalid in ``encoding``
        """
        return self.payload.decode(encoding, "replace")

    def __len__(self) -> int:
        return len(self.payload)

    def __repr__(self) -> str:
        return f"Bulk({self.payload!r})"


@dataclasses.dataclass(frozen=True, slots=True)
class NullBulk:
    """The null bulk reply (``$-1``), i.e. no value"""

    payload: ClassVar[bytes] = b""
    is_null: ClassVar[bool] = True

    def as_bytes(self) -> bytes:
        return self.payload

    def as_string(self, encoding: str = "utf-8") -> str:
        return ""

    def __len__(self) -> int:
        return 0

    def __repr__(self) -> str:
        return "NullBulk()"


@dataclasses.dataclass(frozen=True, slots=True)
class Array:
    """Ordered sequence of nested replies (multi bulk)"""

    elements: tuple[Reply, ...] = ()

    def as_reply_list(self) -> list[Reply]:
        return list(self.elements)

    def as_string_list(self, encoding: str = "utf-8") -> list[str]:
        """
        Flatten an array of status, integer & bulk replies into strings.
        Null bulk elements are returned as empty strings.

        :raises: :exc:`~respwire.exceptions.ReplyTypeError` if any element is
         an error or a nested array
        """
        strings: list[str] = []
        for element in self.elements:
            match element:
                case Status() | Integer() | Bulk() | NullBulk():
                    strings.append(element.as_string(encoding))
                case _:
                    raise ReplyTypeError(
                        f"Could not convert {reply_type_name(element)} reply to a string"
                    )
        return strings

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Reply]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> Reply:
        return self.elements[index]

    def __repr__(self) -> str:
        return f"Array({list(self.elements)!r})"


Reply = Union[Status, Error, Integer, Bulk, NullBulk, Array]

#: RESP marker for each reply kind
MARKERS: Final[dict[type, DataType]] = {
    Status: DataType.SIMPLE_STRING,
    Error: DataType.ERROR,
    Integer: DataType.INT,
    Bulk: DataType.BULK_STRING,
    NullBulk: DataType.BULK_STRING,
    Array: DataType.ARRAY,
}


def reply_type_name(reply: Reply) -> str:
    match reply:
        case Status():
            return "status"
        case Error():
            return "error"
        case Integer():
            return "integer"
        case NullBulk():
            return "null bulk"
        case Bulk():
            return "bulk"
        case Array():
            return "array"
    raise ReplyTypeError(f"{reply!r} is not a reply")


def marker_of(reply: Reply) -> DataType:
    """
    The RESP marker that introduces ``reply`` on the wire
    """
    try:
        return MARKERS[type(reply)]
    except KeyError:
        raise ReplyTypeError(f"{reply!r} is not a reply") from None


def expect_string(reply: Reply, encoding: str = "utf-8") -> str:
    """
    Interpret a status, integer or bulk reply as text

    :raises: :exc:`~respwire.exceptions.ReplyTypeError` for errors & arrays
    """
    match reply:
        case Status() | Integer() | Bulk() | NullBulk():
            return reply.as_string(encoding)
    raise ReplyTypeError(f"Expected a string reply, got {reply_type_name(reply)}")


def expect_int(reply: Reply) -> int:
    """
    Interpret an integer reply as a python int

    :raises: :exc:`~respwire.exceptions.ReplyTypeError` if ``reply`` is
     not an integer reply
    """
    if isinstance(reply, Integer):
        return reply.as_int()
    raise ReplyTypeError(f"Expected an integer reply, got {reply_type_name(reply)}")
