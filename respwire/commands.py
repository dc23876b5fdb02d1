"""
respwire.commands
-----------------
Pre encoded command invocations.

Each builder returns a :class:`Command` that can be handed to
:meth:`respwire.Redis.execute`. Builders only marshal their arguments
into the RESP array framing; interpreting the reply is left to the
caller.
"""

from __future__ import annotations

import dataclasses
import enum

from respwire._packer import Packer
from respwire._utils import nativestr
from respwire.exceptions import DataError
from respwire.typing import KeyT, StringT, ValueT


class CommandName(bytes, enum.Enum):
    """
    Enum for listing the supported redis commands
    """

    APPEND = b"APPEND"  # Since redis: 2.0.0
    AUTH = b"AUTH"  # Since redis: 1.0.0
    DBSIZE = b"DBSIZE"  # Since redis: 1.0.0
    DEL = b"DEL"  # Since redis: 1.0.0
    ECHO = b"ECHO"  # Since redis: 1.0.0
    EXISTS = b"EXISTS"  # Since redis: 1.0.0
    LINDEX = b"LINDEX"  # Since redis: 1.0.0
    LINSERT = b"LINSERT"  # Since redis: 2.2.0
    LLEN = b"LLEN"  # Since redis: 1.0.0
    LPOP = b"LPOP"  # Since redis: 1.0.0
    LPUSH = b"LPUSH"  # Since redis: 1.0.0
    LPUSHX = b"LPUSHX"  # Since redis: 2.2.0
    LRANGE = b"LRANGE"  # Since redis: 1.0.0
    LREM = b"LREM"  # Since redis: 1.0.0
    LSET = b"LSET"  # Since redis: 1.0.0
    LTRIM = b"LTRIM"  # Since redis: 1.0.0
    MOVE = b"MOVE"  # Since redis: 1.0.0
    PING = b"PING"  # Since redis: 1.0.0
    QUIT = b"QUIT"  # Since redis: 1.0.0
    RANDOMKEY = b"RANDOMKEY"  # Since redis: 1.0.0
    RENAME = b"RENAME"  # Since redis: 1.0.0
    RENAMENX = b"RENAMENX"  # Since redis: 1.0.0
    RPOP = b"RPOP"  # Since redis: 1.0.0
    RPOPLPUSH = b"RPOPLPUSH"  # Since redis: 1.2.0
    RPUSH = b"RPUSH"  # Since redis: 1.0.0
    RPUSHX = b"RPUSHX"  # Since redis: 2.2.0
    SELECT = b"SELECT"  # Since redis: 1.0.0
    STRLEN = b"STRLEN"  # Since redis: 2.2.0
    SWAPDB = b"SWAPDB"  # Since redis: 4.0.0
    TOUCH = b"TOUCH"  # Since redis: 3.2.1
    UNLINK = b"UNLINK"  # Since redis: 4.0.0

    def __str__(self) -> str:
        return self.value.decode("latin-1")


class InsertPosition(bytes, enum.Enum):
    """
    Where :func:`linsert` places the new element relative to the pivot
    """

    BEFORE = b"BEFORE"
    AFTER = b"AFTER"


@dataclasses.dataclass(frozen=True, slots=True)
class Command:
    """
    A command invocation, already framed for the wire
    """

    #: Name of the command, used in diagnostics & error messages
    name: str
    #: RESP encoded array of bulk strings
    payload: bytes

    @classmethod
    def build(cls, name: StringT, *args: ValueT, encoding: str = "utf-8") -> Command:
        """
        Encode an arbitrary command. The name is sent as a single
        bulk string and is never split on whitespace.
        """
        return cls(nativestr(name), Packer(encoding).pack_command(name, *args))

    def __repr__(self) -> str:
        return f"Command<{self.name},{len(self.payload)} bytes>"


def _command(name: CommandName, *args: ValueT) -> Command:
    return Command(str(name), Packer().pack_command(name.value, *args))


def _variadic(name: CommandName, head: tuple[ValueT, ...], values: tuple[ValueT, ...]) -> Command:
    if not values:
        raise DataError(f"{name} requires at least one {'value' if head else 'key'}")
    return _command(name, *head, *values)


def append(key: KeyT, value: ValueT) -> Command:
    """Integer reply: the length of the string after the append operation"""
    return _command(CommandName.APPEND, key, value)


def auth(password: StringT, username: StringT | None = None) -> Command:
    """Status reply: ``OK`` if the credentials were accepted"""
    if username is not None:
        return _command(CommandName.AUTH, username, password)
    return _command(CommandName.AUTH, password)


def dbsize() -> Command:
    return _command(CommandName.DBSIZE)


def delete(*keys: KeyT) -> Command:
    """Integer reply: the number of keys that were removed"""
    return _variadic(CommandName.DEL, (), keys)


def echo(message: StringT) -> Command:
    return _command(CommandName.ECHO, message)


def exists(*keys: KeyT) -> Command:
    """Integer reply: the number of the given keys that exist"""
    return _variadic(CommandName.EXISTS, (), keys)


def lindex(key: KeyT, index: int) -> Command:
    """Bulk reply: the requested element, or null when out of range"""
    return _command(CommandName.LINDEX, key, index)


def linsert(key: KeyT, where: InsertPosition, pivot: ValueT, element: ValueT) -> Command:
    """
    Integer reply: the length of the list after the insert, ``-1`` when
    the pivot was not found and ``0`` when the key does not exist
    """
    return _command(CommandName.LINSERT, key, InsertPosition(where).value, pivot, element)


def llen(key: KeyT) -> Command:
    return _command(CommandName.LLEN, key)


def lpop(key: KeyT) -> Command:
    return _command(CommandName.LPOP, key)


def lpush(key: KeyT, *elements: ValueT) -> Command:
    """Integer reply: the length of the list after the push"""
    return _variadic(CommandName.LPUSH, (key,), elements)


def lpushx(key: KeyT, element: ValueT) -> Command:
    return _command(CommandName.LPUSHX, key, element)


def lrange(key: KeyT, start: int, stop: int) -> Command:
    """Array reply: the elements in the given (inclusive) range"""
    return _command(CommandName.LRANGE, key, start, stop)


def lrem(key: KeyT, count: int, element: ValueT) -> Command:
    return _command(CommandName.LREM, key, count, element)


def lset(key: KeyT, index: int, element: ValueT) -> Command:
    return _command(CommandName.LSET, key, index, element)


def ltrim(key: KeyT, start: int, stop: int) -> Command:
    return _command(CommandName.LTRIM, key, start, stop)


def move(key: KeyT, db: int) -> Command:
    return _command(CommandName.MOVE, key, db)


def ping(message: StringT | None = None) -> Command:
    """Status reply ``PONG``, or a bulk reply echoing ``message``"""
    if message is not None:
        return _command(CommandName.PING, message)
    return _command(CommandName.PING)


def quit() -> Command:
    return _command(CommandName.QUIT)


def randomkey() -> Command:
    return _command(CommandName.RANDOMKEY)


def rename(key: KeyT, newkey: KeyT) -> Command:
    return _command(CommandName.RENAME, key, newkey)


def renamenx(key: KeyT, newkey: KeyT) -> Command:
    return _command(CommandName.RENAMENX, key, newkey)


def rpop(key: KeyT) -> Command:
    return _command(CommandName.RPOP, key)


def rpoplpush(source: KeyT, destination: KeyT) -> Command:
    return _command(CommandName.RPOPLPUSH, source, destination)


def rpush(key: KeyT, *elements: ValueT) -> Command:
    """Integer reply: the length of the list after the push"""
    return _variadic(CommandName.RPUSH, (key,), elements)


def rpushx(key: KeyT, element: ValueT) -> Command:
    return _command(CommandName.RPUSHX, key, element)


def select(index: int) -> Command:
    return _command(CommandName.SELECT, index)


def strlen(key: KeyT) -> Command:
    return _command(CommandName.STRLEN, key)


def swapdb(index1: int, index2: int) -> Command:
    return _command(CommandName.SWAPDB, index1, index2)


def touch(*keys: KeyT) -> Command:
    return _variadic(CommandName.TOUCH, (), keys)


def unlink(*keys: KeyT) -> Command:
    return _variadic(CommandName.UNLINK, (), keys)
