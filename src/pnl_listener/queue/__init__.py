# -*- coding: utf-8 -*-
"""Async event channel abstraction and implementation."""

from pnl_listener.queue.base import IAsyncQueue
from pnl_listener.queue.in_memory_queue import InMemoryQueue
from pnl_listener.queue.messages import QueueMessage

__all__ = [
    "IAsyncQueue",
    "InMemoryQueue",
    "QueueMessage",
]
