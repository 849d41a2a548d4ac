"""Event channel exceptions."""

from __future__ import annotations


class QueueError(Exception):
    """Base exception for channel operations."""


class QueueFull(QueueError):
    """Raised by put_nowait when the channel is at capacity."""


class QueueShutdown(QueueError):
    """Raised once the channel has been shut down."""
