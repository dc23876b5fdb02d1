from __future__ import annotations

import dataclasses

from anyio.abc import ByteStream

from respwire.exceptions import ConnectionError
from respwire.typing import Unpack

from ._base import BaseConnection, BaseConnectionParams, Location


@dataclasses.dataclass(unsafe_hash=True)
class StreamLocation(Location):
    """Placeholder location for a stream established by the caller"""

    #: free form description of the peer
    name: str = "stream"

    def __str__(self) -> str:
        return self.name


class StreamConnection(BaseConnection):
    """
    Connection over a :class:`~anyio.abc.ByteStream` that was already
    established elsewhere (for example a TLS stream with a custom
    handshake, or an in memory stream in tests).
    """

    location: StreamLocation

    def __init__(
        self,
        stream: ByteStream,
        location: StreamLocation | None = None,
        **kwargs: Unpack[BaseConnectionParams],
    ):
        super().__init__(location or StreamLocation(), **kwargs)
        self._pending_stream: ByteStream | None = stream

    async def _connect(self) -> ByteStream:
        stream, self._pending_stream = self._pending_stream, None
        if stream is None:
            raise ConnectionError("Stream already consumed")
        return stream

    def describe(self) -> str:
        return f"StreamConnection<{self.location.name}>"
