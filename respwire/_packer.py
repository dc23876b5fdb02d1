from __future__ import annotations

from respwire.constants import SYM_CRLF, SYM_DOLLAR, SYM_EMPTY, SYM_STAR
from respwire.exceptions import DataError
from respwire.typing import ValueT


class Packer:
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def encode(self, value: ValueT) -> bytes:
        """Returns a bytestring representation of the value"""
        if isinstance(value, bytes):
            return value
        elif isinstance(value, str):
            return value.encode(self.encoding)
        elif isinstance(value, bool):
            raise DataError(f"Invalid argument {value!r}: booleans can not be sent as is")
        elif isinstance(value, int):
            return b"%d" % value
        elif isinstance(value, float):
            return b"%.15g" % value
        raise DataError(f"Invalid argument of type {type(value).__name__}: {value!r}")

    def pack_bulk_string(self, value: ValueT) -> bytes:
        "Frame a single value as a RESP bulk string"
        data = self.encode(value)
        return SYM_EMPTY.join((SYM_DOLLAR, b"%d" % len(data), SYM_CRLF, data, SYM_CRLF))

    def pack_command(self, command: ValueT, *args: ValueT) -> bytes:
        "Pack a command name and its arguments into a RESP array of bulk strings"
        output: list[bytes] = [SYM_STAR, b"%d" % (1 + len(args)), SYM_CRLF]
        for arg in (command, *args):
            data = self.encode(arg)
            output.extend((SYM_DOLLAR, b"%d" % len(data), SYM_CRLF, data, SYM_CRLF))
        return SYM_EMPTY.join(output)
