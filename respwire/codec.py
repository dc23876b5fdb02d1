"""
respwire.codec
--------------
One shot helpers around :class:`~respwire._packer.Packer` and
:class:`~respwire._unpacker.Unpacker` for callers that already hold
complete buffers.
"""

from __future__ import annotations

from respwire._packer import Packer
from respwire._unpacker import NotEnoughData, Unpacker
from respwire.constants import SYM_CRLF, SYM_EMPTY, DataType
from respwire.reply import Array, Bulk, Error, Integer, NullBulk, Reply, Status
from respwire.typing import Iterator, ValueT


def encode(command: ValueT, *args: ValueT, encoding: str = "utf-8") -> bytes:
    """
    Frame a command invocation as a RESP array of bulk strings::

        >>> encode("SET", "key", 1)
        b'*3\\r\\n$3\\r\\nSET\\r\\n$3\\r\\nkey\\r\\n$1\\r\\n1\\r\\n'
    """
    return Packer(encoding).pack_command(command, *args)


def decode(data: bytes, max_nesting_depth: int | None = None) -> Reply:
    """
    Decode the first reply in ``data``. The buffer is treated as the
    complete stream, so a reply that is cut short raises rather than
    waiting for more bytes.

    :raises: :exc:`~respwire.exceptions.EndOfStreamError` if ``data`` is empty
    :raises: :exc:`~respwire.exceptions.ProtocolError` if ``data`` is malformed
     or ends in the middle of a reply
    """
    unpacker = Unpacker(max_nesting_depth=max_nesting_depth)
    unpacker.feed(data)
    reply = unpacker.parse()
    if not isinstance(reply, NotEnoughData):
        return reply
    unpacker.on_eof()


def decode_all(data: bytes, max_nesting_depth: int | None = None) -> Iterator[Reply]:
    """
    Decode every reply in ``data`` in order

    :raises: :exc:`~respwire.exceptions.ProtocolError` if the last reply is
     incomplete
    """
    unpacker = Unpacker(max_nesting_depth=max_nesting_depth)
    unpacker.feed(data)
    while True:
        reply = unpacker.parse()
        if isinstance(reply, NotEnoughData):
            if unpacker.pending:
                unpacker.on_eof()
            return
        yield reply


def serialize(reply: Reply) -> bytes:
    """
    Render ``reply`` in its wire form, the inverse of :func:`decode`
    """
    output: list[bytes] = []
    stack: list[Reply] = [reply]
    while stack:
        current = stack.pop()
        match current:
            case Status(payload):
                output.extend((bytes([DataType.SIMPLE_STRING]), payload, SYM_CRLF))
            case Error(payload):
                output.extend((bytes([DataType.ERROR]), payload, SYM_CRLF))
            case Integer(payload):
                output.extend((bytes([DataType.INT]), payload, SYM_CRLF))
            case NullBulk():
                output.extend((bytes([DataType.BULK_STRING]), b"-1", SYM_CRLF))
            case Bulk(payload):
                output.extend(
                    (bytes([DataType.BULK_STRING]), b"%d" % len(payload), SYM_CRLF, payload, SYM_CRLF)
                )
            case Array(elements):
                output.extend((bytes([DataType.ARRAY]), b"%d" % len(elements), SYM_CRLF))
                stack.extend(reversed(elements))
    return SYM_EMPTY.join(output)
