"""Dedup storage for processed event identities."""

from pnl_listener.persistence.in_memory import (
    FifoSeenEventRepository,
    InMemorySeenEventRepository,
)
from pnl_listener.persistence.interfaces import ISeenEventRepository

__all__ = [
    "FifoSeenEventRepository",
    "ISeenEventRepository",
    "InMemorySeenEventRepository",
]
