from __future__ import annotations

import dataclasses
import socket

from anyio import connect_tcp
from anyio.abc import ByteStream, SocketAttribute

from respwire.typing import Unpack

from ._base import BaseConnection, BaseConnectionParams, Location


@dataclasses.dataclass(unsafe_hash=True)
class TCPLocation(Location):
    """Location of a redis instance listening on a tcp port"""

    #: hostname of the server
    host: str = "localhost"
    #: the port the server is listening on
    port: int = 6379

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class TCPConnection(BaseConnection):
    """
    Connection to a redis server over tcp, optionally wrapped in TLS when
    an ``ssl_context`` is provided
    """

    location: TCPLocation

    def __init__(
        self,
        location: TCPLocation,
        *,
        socket_keepalive: bool | None = None,
        socket_keepalive_options: dict[int, int | bytes] | None = None,
        **kwargs: Unpack[BaseConnectionParams],
    ):
        """
        :param location: host & port of the server
        :param socket_keepalive: Whether to enable ``SO_KEEPALIVE`` on the socket
        :param socket_keepalive_options: ``SOL_TCP`` level options (for example
         ``socket.TCP_KEEPIDLE``) applied when ``socket_keepalive`` is enabled
        """
        super().__init__(location, **kwargs)
        self._socket_keepalive = socket_keepalive
        self._socket_keepalive_options: dict[int, int | bytes] = socket_keepalive_options or {}

    @property
    def tls(self) -> bool:
        return self._ssl_context is not None

    async def _connect(self) -> ByteStream:
        stream: ByteStream
        if self._ssl_context is not None:
            stream = await connect_tcp(
                self.location.host,
                self.location.port,
                tls=True,
                ssl_context=self._ssl_context,
                tls_standard_compatible=False,
            )
        else:
            stream = await connect_tcp(self.location.host, self.location.port)
        if self._socket_keepalive:
            self._enable_keepalive(stream)
        return stream

    def _enable_keepalive(self, stream: ByteStream) -> None:
        sock = stream.extra(SocketAttribute.raw_socket, default=None)
        if sock is None:
            return
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        for option, value in self._socket_keepalive_options.items():
            sock.setsockopt(socket.SOL_TCP, option, value)

    def describe(self) -> str:
        scheme = "rediss" if self.tls else "redis"
        return f"TCPConnection<{scheme}://{self.location}>"
