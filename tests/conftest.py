from __future__ import annotations

import contextlib

import anyio
import pytest
from anyio import BrokenResourceError, ClosedResourceError, EndOfStream
from anyio.abc import ByteStream, SocketAttribute, SocketStream

from respwire._unpacker import NotEnoughData, Unpacker
from respwire.codec import serialize
from respwire.reply import Array, Bulk, Error, Integer, NullBulk, Reply, Status


@pytest.fixture(
    params=[
        pytest.param("asyncio", id="asyncio"),
        pytest.param("trio", id="trio"),
    ]
)
def anyio_backend(request):
    return request.param


class FakeStream(ByteStream):
    """
    Byte stream replaying scripted chunks. Once the chunks are exhausted
    the stream either ends or, with ``hang=True``, blocks forever.
    """

    def __init__(self, chunks=(), hang=False):
        self.chunks = list(chunks)
        self.hang = hang
        self.sent: list[bytes] = []
        self.closed = False

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if self.closed:
            raise ClosedResourceError
        if not self.chunks:
            if self.hang:
                await anyio.sleep_forever()
            raise EndOfStream
        chunk = self.chunks.pop(0)
        if len(chunk) > max_bytes:
            self.chunks.insert(0, chunk[max_bytes:])
            chunk = chunk[:max_bytes]
        return chunk

    async def send(self, item: bytes) -> None:
        if self.closed:
            raise ClosedResourceError
        self.sent.append(item)

    async def send_eof(self) -> None:
        pass

    async def aclose(self) -> None:
        self.closed = True


class FakeRedis:
    """
    Minimal in memory redis speaking RESP over real sockets
    """

    def __init__(self, password=None, username=None, databases=16):
        self.password = password
        self.username = username
        self.databases = databases
        self.received: list[list[bytes]] = []
        self.overrides: dict[bytes, bytes] = {}
        self.lists: dict[bytes, list[bytes]] = {}
        self.port: int | None = None

    def respond(self, args: list[bytes], state: dict) -> bytes | None:
        name = args[0].upper()
        if name in self.overrides:
            return self.overrides[name]
        if self.password is not None and not state.get("authenticated") and name != b"AUTH":
            return serialize(Error(b"NOAUTH Authentication required."))
        match name:
            case b"PING":
                return serialize(Bulk(args[1]) if len(args) > 1 else Status(b"PONG"))
            case b"ECHO":
                return serialize(Bulk(args[1]))
            case b"AUTH":
                password = args[-1].decode()
                username = args[1].decode() if len(args) == 3 else None
                if self.password is None:
                    return serialize(
                        Error(
                            b"ERR AUTH <password> called without any password configured "
                            b"for the default user. Are you sure your configuration is correct?"
                        )
                    )
                if password != self.password or username not in (None, self.username):
                    return serialize(
                        Error(b"WRONGPASS invalid username-password pair or user is disabled.")
                    )
                state["authenticated"] = True
                return serialize(Status(b"OK"))
            case b"SELECT":
                if not 0 <= int(args[1]) < self.databases:
                    return serialize(Error(b"ERR DB index is out of range"))
                state["db"] = int(args[1])
                return serialize(Status(b"OK"))
            case b"RPUSH" | b"LPUSH":
                values = self.lists.setdefault(args[1], [])
                for value in args[2:]:
                    if name == b"RPUSH":
                        values.append(value)
                    else:
                        values.insert(0, value)
                return serialize(Integer(b"%d" % len(values)))
            case b"LLEN":
                return serialize(Integer(b"%d" % len(self.lists.get(args[1], []))))
            case b"LPOP":
                values = self.lists.get(args[1])
                return serialize(Bulk(values.pop(0)) if values else NullBulk())
            case b"LRANGE":
                values = self.lists.get(args[1], [])
                start, stop = int(args[2]), int(args[3])
                stop = len(values) if stop == -1 else stop + 1
                return serialize(Array(tuple(Bulk(v) for v in values[start:stop])))
            case b"QUIT":
                return None
        return serialize(
            Error(b"ERR unknown command '%s', with args beginning with: " % args[0])
        )

    async def handle(self, client: SocketStream) -> None:
        unpacker = Unpacker()
        state: dict = {}
        async with client:
            while True:
                try:
                    data = await client.receive()
                except (EndOfStream, BrokenResourceError, ClosedResourceError):
                    return
                unpacker.feed(data)
                while not isinstance(command := unpacker.parse(), NotEnoughData):
                    assert isinstance(command, Array)
                    args = [element.as_bytes() for element in command]
                    self.received.append(args)
                    response = self.respond(args, state)
                    if response is None:
                        await client.send(serialize(Status(b"OK")))
                        return
                    await client.send(response)


@contextlib.asynccontextmanager
async def serve(server: FakeRedis):
    async with await anyio.create_tcp_listener(local_host="127.0.0.1") as listener:
        server.port = listener.extra(SocketAttribute.local_port)
        async with anyio.create_task_group() as tg:
            tg.start_soon(listener.serve, server.handle)
            yield server
            tg.cancel_scope.cancel()


def replies(*items: Reply) -> bytes:
    return b"".join(serialize(item) for item in items)
