# -*- coding: utf-8 -*-
"""Unit tests for InMemoryQueue."""

from __future__ import annotations

import asyncio

import pytest

from pnl_listener.exceptions import QueueFull, QueueShutdown
from pnl_listener.queue import InMemoryQueue, QueueMessage


async def test_put_get_preserves_order() -> None:
    queue: InMemoryQueue[QueueMessage[int]] = InMemoryQueue()
    for i in range(3):
        queue.put_nowait(QueueMessage[int].create(payload=i))
    got = [(await queue.get()).payload for _ in range(3)]
    assert got == [0, 1, 2]


async def test_full_queue_raises_queue_full() -> None:
    queue: InMemoryQueue[int] = InMemoryQueue(maxsize=1)
    queue.put_nowait(1)
    with pytest.raises(QueueFull):
        queue.put_nowait(2)


async def test_shutdown_wakes_waiting_consumer() -> None:
    queue: InMemoryQueue[int] = InMemoryQueue()
    getter = asyncio.create_task(queue.get())
    await asyncio.sleep(0)
    queue.shutdown(immediate=True)
    with pytest.raises(QueueShutdown):
        await getter
    with pytest.raises(QueueShutdown):
        queue.put_nowait(1)


async def test_immediate_shutdown_drops_pending_items() -> None:
    queue: InMemoryQueue[int] = InMemoryQueue()
    queue.put_nowait(1)
    queue.shutdown(immediate=True)
    assert queue.qsize() == 0
    await asyncio.wait_for(queue.join(), timeout=1.0)
