from __future__ import annotations

from ._base import BaseConnection, BaseConnectionParams, Location
from ._stream import StreamConnection, StreamLocation
from ._tcp import TCPConnection, TCPLocation
from ._uds import UnixDomainSocketConnection, UnixDomainSocketLocation

#: Default connection type
Connection = TCPConnection
__all__ = [
    "BaseConnectionParams",
    "BaseConnection",
    "Connection",
    "TCPConnection",
    "Location",
    "TCPLocation",
    "StreamConnection",
    "StreamLocation",
    "UnixDomainSocketLocation",
    "UnixDomainSocketConnection",
]
