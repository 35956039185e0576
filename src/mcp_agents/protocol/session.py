"""Session — the single authenticated backend client shared by all requests.

The client is created once, either when ``initialize`` arrives or lazily on
the first ``tools/call``, and is then read by every concurrent handler
without locking. Creation and replacement go through one ``asyncio.Lock`` so
that concurrent callers never open or refresh the client twice.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT")


class Session(ABC, Generic[ClientT]):
    """Owns the backend client handle for one agent process.

    Subclasses implement :meth:`_open` (acquire and validate credentials,
    build the client) and may override :meth:`_refresh` and :meth:`_close`.
    """

    def __init__(self) -> None:
        self._client: ClientT | None = None
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self._client is not None

    async def ensure_ready(self) -> ClientT:
        """Return the client, opening it first if needed."""
        client = self._client
        if client is not None:
            return client
        async with self._lock:
            if self._client is None:
                logger.debug("%s: opening session", type(self).__name__)
                self._client = await self._open()
            return self._client

    async def refresh(self, stale: ClientT) -> ClientT:
        """Replace *stale* with a fresh client.

        Backends call this when the service rejects a client's credentials.
        If another task already replaced the handle, the current one is
        returned without refreshing again; if the session was closed in the
        meantime, it is opened anew.
        """
        async with self._lock:
            if self._client is None:
                logger.debug("%s: reopening closed session", type(self).__name__)
                self._client = await self._open()
                return self._client
            if self._client is not stale:
                return self._client
            logger.info("%s: refreshing session", type(self).__name__)
            self._client = await self._refresh(stale)
            return self._client

    async def close(self) -> None:
        """Release the client, if one was opened."""
        async with self._lock:
            client, self._client = self._client, None
        if client is not None:
            await self._close(client)

    @abstractmethod
    async def _open(self) -> ClientT: ...

    async def _refresh(self, stale: ClientT) -> ClientT:
        await self._close(stale)
        return await self._open()

    async def _close(self, client: ClientT) -> None:  # noqa: B027
        """Hook for subclasses that hold network resources."""
