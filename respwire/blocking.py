"""
respwire.blocking
-----------------
Blocking facade over :class:`respwire.Redis` for code that does not run in
an event loop. The client runs on an event loop in a background thread and
each call blocks the calling thread until the corresponding coroutine
completes::

    with BlockingRedis("localhost", 6379) as client:
        reply = client.execute(commands.ping())
"""

from __future__ import annotations

from contextlib import AbstractContextManager

from anyio.from_thread import BlockingPortal, start_blocking_portal

from respwire.client import Redis
from respwire.commands import Command
from respwire.connection import BaseConnection
from respwire.exceptions import ConnectionError
from respwire.reply import Reply
from respwire.typing import Self


class BlockingRedis:
    """
    Thread blocking equivalent of :class:`~respwire.Redis`. Accepts the same
    arguments plus ``backend`` (``asyncio`` or ``trio``) to select the event
    loop implementation.

    Calls from several threads are forwarded to the same event loop and are
    subject to the same caveat as :class:`~respwire.Redis`: concurrent
    :meth:`execute` calls may receive each other's replies.
    """

    def __init__(self, *args: object, backend: str = "asyncio", **kwargs: object):
        self.client = Redis(*args, **kwargs)  # type: ignore[arg-type]
        self._backend = backend
        self._portal_cm: AbstractContextManager[BlockingPortal] | None = None
        self._portal: BlockingPortal | None = None

    @classmethod
    def from_url(cls, url: str, *, backend: str = "asyncio", **kwargs: object) -> Self:
        instance = cls(backend=backend)
        instance.client = Redis.from_url(url, **kwargs)
        return instance

    def __repr__(self) -> str:
        return f"{type(self).__name__}<{self.client.location},db={self.client.db}>"

    def _ensure_portal(self) -> BlockingPortal:
        if self._portal is None:
            raise ConnectionError(f"Not connected to {self.client.location}, call connect() first")
        return self._portal

    def connect(self) -> BaseConnection:
        """
        Start the event loop thread (if needed) and run :meth:`Redis.connect`
        """
        if self._portal is None:
            self._portal_cm = start_blocking_portal(self._backend)
            self._portal = self._portal_cm.__enter__()
        try:
            return self._portal.call(self.client.connect)
        except BaseException:
            self._stop_portal()
            raise

    def execute(self, command: Command) -> Reply:
        """
        Block until the reply to ``command`` has been received. See
        :meth:`Redis.execute`
        """
        return self._ensure_portal().call(self.client.execute, command)

    def close(self) -> None:
        """
        Close the connection and stop the event loop thread. Safe to call
        more than once.
        """
        if self._portal is None:
            return
        try:
            self._portal.call(self.client.close)
        finally:
            self._stop_portal()

    def _stop_portal(self) -> None:
        portal_cm, self._portal_cm, self._portal = self._portal_cm, None, None
        if portal_cm is not None:
            portal_cm.__exit__(None, None, None)

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
