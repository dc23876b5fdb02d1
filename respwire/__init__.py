"""
respwire
--------

respwire is an async client for the redis serialization protocol (RESP)
operating a single connection in strict request / response lockstep.
"""

from __future__ import annotations

import logging

from respwire import commands
from respwire.blocking import BlockingRedis
from respwire.client import Redis
from respwire.codec import decode, encode
from respwire.commands import Command
from respwire.config import Config
from respwire.connection import (
    BaseConnection,
    Connection,
    StreamConnection,
    TCPLocation,
    UnixDomainSocketConnection,
    UnixDomainSocketLocation,
)
from respwire.reply import Array, Bulk, Error, Integer, NullBulk, Reply, Status

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__version__ = "1.0.0"

__all__ = [
    "Array",
    "BaseConnection",
    "BlockingRedis",
    "Bulk",
    "Command",
    "commands",
    "Config",
    "Connection",
    "decode",
    "encode",
    "Error",
    "Integer",
    "NullBulk",
    "Redis",
    "Reply",
    "Status",
    "StreamConnection",
    "TCPLocation",
    "UnixDomainSocketConnection",
    "UnixDomainSocketLocation",
]
