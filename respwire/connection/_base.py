from __future__ import annotations

import dataclasses
import ssl
from abc import ABC, abstractmethod

from anyio import (
    BrokenResourceError,
    CancelScope,
    ClosedResourceError,
    EndOfStream,
    Lock,
    get_cancelled_exc_class,
    move_on_after,
)
from anyio.abc import ByteStream

from respwire._unpacker import NotEnoughData, Unpacker
from respwire._utils import logger
from respwire.exceptions import ConnectionError, ProtocolError, TimeoutError
from respwire.reply import Reply
from respwire.typing import NotRequired, Self, TypedDict

#: Maximum number of bytes requested from the transport per read
DEFAULT_READ_SIZE = 65536


@dataclasses.dataclass(unsafe_hash=True)
class Location:
    """
    Abstract location
    """

    ...


class BaseConnectionParams(TypedDict):
    """
    The common parameters accepted by :class:`respwire.connection.BaseConnection`
    """

    #: Maximum time to wait for receiving a reply. ``None`` waits forever.
    stream_timeout: NotRequired[float | None]
    #: Maximum time to wait for establishing a connection
    connect_timeout: NotRequired[float | None]
    #: Maximum number of bytes requested from the transport per read
    read_size: NotRequired[int]
    #: Deepest array nesting accepted in replies
    max_nesting_depth: NotRequired[int | None]
    #: For TLS connections, the ssl context to use when performing the TLS handshake
    ssl_context: NotRequired[ssl.SSLContext | None]


class BaseConnection(ABC):
    """
    Base class for Redis connections.

    Owns the byte stream to a single Redis server and exposes the raw
    :meth:`send` and :meth:`receive` primitives. Each direction is guarded
    by its own lock, so concurrent senders (or receivers) are serialized,
    but a send followed by a receive is **not** atomic: two tasks issuing
    requests concurrently on the same connection may each receive the
    reply meant for the other. A connection should therefore be used by
    one logical caller at a time.

    Subclasses must implement the :meth:`_connect` method to establish the underlying
    transport (TCP, UNIX socket, etc.).
    """

    Params = BaseConnectionParams
    """
    :meta private:
    """

    def __init__(
        self,
        location: Location,
        *,
        stream_timeout: float | None = None,
        connect_timeout: float | None = None,
        read_size: int = DEFAULT_READ_SIZE,
        max_nesting_depth: int | None = None,
        ssl_context: ssl.SSLContext | None = None,
    ):
        """
        :param location: The location of the server this connection is connecting to
        :param stream_timeout: Maximum time to wait for receiving a reply. The
         connection is closed if the deadline is exceeded since the stream can
         no longer be trusted to be aligned on a reply boundary.
        :param connect_timeout: Maximum time to wait for establishing a connection
        :param read_size: Maximum number of bytes requested from the transport per read
        :param max_nesting_depth: Deepest array nesting accepted in replies
        :param ssl_context: For TLS connections, the ssl context to use when performing
         the TLS handshake.
        """
        self.location = location
        self._stream_timeout = stream_timeout
        self._connect_timeout = connect_timeout
        self._read_size = read_size
        self._ssl_context = ssl_context

        # The actual connection to the server
        self.stream: ByteStream | None = None
        self._unpacker = Unpacker(max_nesting_depth=max_nesting_depth)
        self._send_lock = Lock()
        self._receive_lock = Lock()

        # Error & State flags
        self._last_error: BaseException | None = None
        self._transport_failed = False
        self._closed = False

    def __repr__(self) -> str:
        return self.describe()

    @abstractmethod
    def describe(self) -> str: ...

    @abstractmethod
    async def _connect(self) -> ByteStream:
        """
        Establish and return the underlying transport connection to the Redis server.
        """
        ...

    @property
    def usable(self) -> bool:
        """
        Whether the connection is established and no transport or framing
        error has been encountered
        """
        return self.stream is not None and not self._transport_failed and not self._closed

    async def connect(self) -> None:
        """
        Establish the transport.

        .. note:: A connection can only be established once. Once it is
           closed, either explicitly or due to an error, it should be discarded.
        """
        if self.stream is not None or self._closed:
            raise ConnectionError("Connection cannot be reused")
        with move_on_after(self._connect_timeout) as scope:
            try:
                self.stream = await self._connect()
            except OSError as err:
                self._last_error = err
                raise ConnectionError(
                    f"Unable to establish a connection to {self.location}"
                ) from err
        if scope.cancelled_caught and self.stream is None:
            raise TimeoutError(f"Timed out connecting to {self.location}")
        logger.debug("Connected %s", self.describe())

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def _ensure_usable(self) -> ByteStream:
        if self._closed:
            raise ConnectionError("Connection closed") from self._last_error
        if self.stream is None:
            raise ConnectionError("Connection not established")
        if self._transport_failed:
            raise ConnectionError("Connection not usable") from self._last_error
        return self.stream

    async def _fail(self, error: BaseException) -> None:
        self._transport_failed = True
        self._last_error = error
        logger.info("Discarding %s", self.describe(), exc_info=error)
        with CancelScope(shield=True):
            try:
                await self.aclose()
            except ConnectionError:
                logger.debug("Error closing %s", self.describe(), exc_info=True)

    async def send(self, data: bytes) -> None:
        """
        Write ``data`` to the server as is. Being cancelled while the data
        is written closes the connection since the request may have been
        partially sent.

        :raises: :exc:`~respwire.exceptions.ConnectionError` if the connection
         is not usable or the transport fails
        """
        async with self._send_lock:
            stream = self._ensure_usable()
            try:
                await stream.send(data)
            except get_cancelled_exc_class():
                await self._fail(
                    ConnectionError(f"Cancelled while sending a request to {self.describe()}")
                )
                raise
            except (ClosedResourceError, BrokenResourceError, OSError) as err:
                error = ConnectionError("Connection lost while sending request")
                await self._fail(err)
                raise error from err

    async def receive(self) -> Reply:
        """
        Wait for the next complete reply from the server. Being cancelled
        while waiting closes the connection since the reply that is still
        due could otherwise be returned to the next caller.

        :raises: :exc:`~respwire.exceptions.EndOfStreamError` if the server closed
         the connection before a reply started
        :raises: :exc:`~respwire.exceptions.ProtocolError` if the reply is
         malformed or cut short
        :raises: :exc:`~respwire.exceptions.TimeoutError` if ``stream_timeout``
         elapsed before a reply was received
        """
        try:
            async with self._receive_lock:
                stream = self._ensure_usable()
                return await self._receive_reply(stream)
        except get_cancelled_exc_class():
            await self._fail(
                ConnectionError(f"Cancelled while waiting for a reply from {self.describe()}")
            )
            raise

    async def _receive_reply(self, stream: ByteStream) -> Reply:
        try:
            with move_on_after(self._stream_timeout):
                return await self._read_reply(stream)
        except ConnectionError as err:
            await self._fail(err)
            raise
        except Exception as err:
            await self._fail(err)
            raise ProtocolError(f"Unable to decode reply: {err}") from err
        reason = f"{self.describe()} timed out after {self._stream_timeout} seconds"
        error = TimeoutError(reason)
        await self._fail(error)
        raise error

    async def _read_reply(self, stream: ByteStream) -> Reply:
        while True:
            reply = self._unpacker.parse()
            if not isinstance(reply, NotEnoughData):
                return reply
            try:
                data = await stream.receive(self._read_size)
            except EndOfStream:
                self._unpacker.on_eof()
            except (ClosedResourceError, BrokenResourceError, OSError) as err:
                raise ConnectionError("Connection lost while receiving response") from err
            self._unpacker.feed(data)

    async def aclose(self) -> None:
        """
        Close the connection. Closing an already closed connection
        is a no-op, any other operation on a closed connection raises
        :exc:`~respwire.exceptions.ConnectionError`.
        """
        if self._closed:
            return
        self._closed = True
        stream, self.stream = self.stream, None
        if stream is not None:
            try:
                await stream.aclose()
            except (BrokenResourceError, OSError) as err:
                raise ConnectionError("Could not close connection") from err
            finally:
                logger.debug("Closed %s", self.describe())
