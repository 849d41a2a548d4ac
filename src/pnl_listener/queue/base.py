# -*- coding: utf-8 -*-
"""Async channel interface between the WebSocket reader and the event pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IAsyncQueue[T](ABC):
    """Single-consumer channel: the transport side puts without blocking, the pipeline gets.

    Errors come from exceptions.queue_exceptions (QueueFull, QueueShutdown).
    """

    @abstractmethod
    def put_nowait(self, item: T) -> None:
        """Enqueue item without waiting.

        Raises:
            QueueFull: The channel is at capacity.
            QueueShutdown: The channel no longer accepts items.
        """
        ...

    @abstractmethod
    async def get(self) -> T:
        """Wait for and return the next item.

        Raises:
            QueueShutdown: The channel was shut down (and drained, unless immediate).
        """
        ...

    @abstractmethod
    def task_done(self) -> None:
        """Mark one item returned by get() as handled."""
        ...

    @abstractmethod
    def shutdown(self, immediate: bool = False) -> None:
        """Stop accepting items; with immediate=True pending items are dropped too."""
        ...

    @abstractmethod
    async def join(self) -> None:
        """Wait until every item taken with get() has been marked task_done()."""
        ...

    @abstractmethod
    def qsize(self) -> int:
        """Return the number of items waiting."""
        ...
