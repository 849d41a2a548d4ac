# -*- coding: utf-8 -*-
"""asyncio.Queue backed channel."""

from __future__ import annotations

import asyncio

from pnl_listener.exceptions import QueueFull, QueueShutdown
from pnl_listener.queue.base import IAsyncQueue


class InMemoryQueue[T](IAsyncQueue[T]):
    """In-process channel; asyncio errors are translated to the package's queue errors."""

    def __init__(self, maxsize: int = 0) -> None:
        """Args:
            maxsize: Maximum number of waiting items. 0 means unbounded.
        """
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize)

    def __len__(self) -> int:
        return self._queue.qsize()

    def put_nowait(self, item: T) -> None:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueShutDown as e:
            raise QueueShutdown from e
        except asyncio.QueueFull as e:
            raise QueueFull from e

    async def get(self) -> T:
        try:
            return await self._queue.get()
        except asyncio.QueueShutDown as e:
            raise QueueShutdown from e

    def task_done(self) -> None:
        self._queue.task_done()

    def shutdown(self, immediate: bool = False) -> None:
        self._queue.shutdown(immediate)

    async def join(self) -> None:
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()
