"""In-memory repository implementations."""

from pnl_listener.persistence.in_memory.seen_event_repository import (
    FifoSeenEventRepository,
    InMemorySeenEventRepository,
)

__all__ = ["FifoSeenEventRepository", "InMemorySeenEventRepository"]
