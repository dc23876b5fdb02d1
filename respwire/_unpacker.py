from __future__ import annotations

import re
from io import BytesIO
from typing import NoReturn

from respwire.config import Config
from respwire.constants import NULL_BULK_LENGTH, SYM_CR, SYM_CRLF, SYM_LF, DataType
from respwire.exceptions import (
    EndOfStreamError,
    InvalidResponse,
    InvalidSizeError,
    ProtocolError,
)
from respwire.reply import Array, Bulk, Error, Integer, NullBulk, Reply, Status
from respwire.typing import Final

#: Bulk lengths and array counts never need more than 19 digits
_SIZE_RE = re.compile(rb"-?[0-9]{1,19}")


class NotEnoughData:
    def __repr__(self) -> str:
        return "NOT_ENOUGH_DATA"


NOT_ENOUGH_DATA: Final[NotEnoughData] = NotEnoughData()


class ArrayNode:
    __slots__ = ("elements", "remaining")

    def __init__(self, remaining: int) -> None:
        self.elements: list[Reply] = []
        self.remaining = remaining


class Unpacker:
    """
    Incremental RESP reply decoder.

    Raw chunks are handed to :meth:`feed` as they arrive and :meth:`parse`
    returns the next complete reply, or :data:`NOT_ENOUGH_DATA` if the
    buffered bytes do not yet hold one. Arrays that are only partially
    received are kept on an explicit node stack so that parsing resumes
    where it left off once more data is fed.
    """

    def __init__(
        self,
        max_nesting_depth: int | None = None,
        max_bulk_size: int | None = None,
    ):
        """
        :param max_nesting_depth: deepest array nesting accepted. Defaults to
         :attr:`respwire.Config.max_nesting_depth`
        :param max_bulk_size: longest bulk string accepted. Defaults to
         :attr:`respwire.Config.max_bulk_size`
        """
        if max_nesting_depth is not None and max_nesting_depth < 1:
            raise ValueError("max_nesting_depth must be at least 1")
        self.max_nesting_depth = (
            max_nesting_depth if max_nesting_depth is not None else Config.max_nesting_depth
        )
        self.max_bulk_size = min(
            max_bulk_size if max_bulk_size is not None else Config.max_bulk_size,
            Config.max_bulk_size,
        )
        self.localbuffer = BytesIO(b"")
        self.bytes_read = 0
        self.bytes_written = 0
        self.nodes: list[ArrayNode] = []

    def feed(self, data: bytes) -> None:
        self.localbuffer.seek(self.bytes_written)
        self.bytes_written += self.localbuffer.write(data)
        self.localbuffer.seek(self.bytes_read)

    @property
    def pending(self) -> bool:
        """
        Whether a reply has been partially received
        """
        return bool(self.nodes) or self.bytes_written > self.bytes_read

    def reset(self) -> None:
        self.localbuffer.seek(0)
        self.localbuffer.truncate()
        self.bytes_read = self.bytes_written = 0
        self.nodes.clear()

    def on_eof(self) -> NoReturn:
        """
        Called when the underlying stream has ended. Always raises.

        :raises: :exc:`~respwire.exceptions.EndOfStreamError` if the stream ended
         on a reply boundary, :exc:`~respwire.exceptions.ProtocolError` if it
         ended in the middle of a reply.
        """
        if self.pending:
            unread = self.bytes_written - self.bytes_read
            raise ProtocolError(
                f"Stream ended in the middle of a reply ({unread} unparsed bytes,"
                f" {len(self.nodes)} incomplete arrays)"
            )
        raise EndOfStreamError("Stream ended before a reply could be read")

    def parse(self) -> Reply | NotEnoughData:
        while True:
            value = self._parse_one()
            if isinstance(value, NotEnoughData):
                return value
            self.bytes_read = self.localbuffer.tell()
            if value is None:
                # non empty array header, elements follow
                continue
            while self.nodes:
                node = self.nodes[-1]
                node.elements.append(value)
                node.remaining -= 1
                if node.remaining > 0:
                    break
                self.nodes.pop()
                value = Array(tuple(node.elements))
            else:
                self._compact()
                return value

    def _compact(self) -> None:
        if self.bytes_read == self.bytes_written:
            self.localbuffer.seek(0)
            self.localbuffer.truncate()
            self.bytes_read = self.bytes_written = 0

    def _rewind(self) -> NotEnoughData:
        self.localbuffer.seek(self.bytes_read)
        return NOT_ENOUGH_DATA

    def _read_line(self) -> bytes | NotEnoughData:
        """
        Read the remainder of a simple line, without the trailing CRLF
        """
        data = self.localbuffer.readline()
        if not data.endswith(SYM_LF):
            cr = data.find(SYM_CR)
            if cr != -1 and cr < len(data) - 1:
                raise ProtocolError(
                    "Simple replies cannot contain a CR or LF character: "
                    f"{data[: cr + 2]!r}"
                )
            return self._rewind()
        if not data.endswith(SYM_CRLF):
            raise ProtocolError(f"Improper line ending, bare LF in {data!r}")
        line = data[:-2]
        if SYM_CR in line:
            raise ProtocolError(f"Simple replies cannot contain a CR or LF character: {data!r}")
        return line

    def _read_size(self) -> int | NotEnoughData:
        line = self._read_line()
        if isinstance(line, NotEnoughData):
            return line
        if not _SIZE_RE.fullmatch(line):
            raise ProtocolError(f"Invalid length {line!r}")
        return int(line)

    def _parse_one(self) -> Reply | None | NotEnoughData:
        """
        Parse the next element at the current position. Returns ``None``
        after pushing the header of a non empty array.
        """
        header = self.localbuffer.read(1)
        if not header:
            return self._rewind()
        marker = header[0]
        if marker == DataType.SIMPLE_STRING or marker == DataType.ERROR or marker == DataType.INT:
            line = self._read_line()
            if isinstance(line, NotEnoughData):
                return line
            match marker:
                case DataType.SIMPLE_STRING:
                    return Status(line)
                case DataType.ERROR:
                    return Error(line)
                case _:
                    return Integer(line)
        elif marker == DataType.BULK_STRING:
            size = self._read_size()
            if isinstance(size, NotEnoughData):
                return size
            if size == NULL_BULK_LENGTH:
                return NullBulk()
            if size < 0:
                raise InvalidSizeError(size)
            if size > self.max_bulk_size:
                raise InvalidSizeError(
                    size, f"Supports bulk strings up to {self.max_bulk_size} bytes, got {size}"
                )
            if self.bytes_written - self.localbuffer.tell() < size + 2:
                return self._rewind()
            data = self.localbuffer.read(size + 2)
            if data[-2:] != SYM_CRLF:
                raise ProtocolError(f"Improper line ending after bulk string: {data[-2:]!r}")
            return Bulk(data[:-2])
        elif marker == DataType.ARRAY:
            count = self._read_size()
            if isinstance(count, NotEnoughData):
                return count
            if count < 0:
                raise InvalidSizeError(count, f"Invalid multi bulk length: {count}")
            if len(self.nodes) >= self.max_nesting_depth:
                raise ProtocolError(
                    f"Arrays nested deeper than {self.max_nesting_depth} levels are not supported"
                )
            if count == 0:
                return Array()
            self.nodes.append(ArrayNode(count))
            return None
        raise InvalidResponse(marker)
