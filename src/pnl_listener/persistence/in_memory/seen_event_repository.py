# -*- coding: utf-8 -*-
"""In-memory seen event repositories: full-clear set and FIFO eviction."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from cachetools import FIFOCache

from pnl_listener.persistence.interfaces.seen_event_repository import (
    ISeenEventRepository,
)


class InMemorySeenEventRepository(ISeenEventRepository):
    """Plain set, emptied completely once it grows past the ceiling.

    Right after a clear, a late duplicate of an already forwarded event is no
    longer recognised and will be forwarded again.
    """

    def __init__(
        self,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._seen: set[str] = set()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def __len__(self) -> int:
        return len(self._seen)

    def contains(self, identity: str) -> bool:
        return identity in self._seen

    def add(self, identity: str) -> None:
        self._seen.add(identity)

    def maybe_collect(self, max_size: int = 50_000) -> int:
        size = len(self._seen)
        if size <= max_size:
            return 0
        self._seen.clear()
        self._logger.warning(
            "seen_events_cleared",
            seen_events_dropped=size,
            seen_events_max_size=max_size,
        )
        return size


class FifoSeenEventRepository(ISeenEventRepository):
    """Insertion-ordered store that drops only the oldest identities past the ceiling.

    Backed by cachetools.FIFOCache sized at the ceiling, so the most recent
    `max_size` identities are always remembered.
    """

    def __init__(
        self,
        max_size: int = 50_000,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        # One slot of headroom: add() may momentarily exceed the ceiling until maybe_collect().
        self._seen: FIFOCache[str, None] = FIFOCache(maxsize=max(1, max_size) + 1)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def __len__(self) -> int:
        return len(self._seen)

    def contains(self, identity: str) -> bool:
        return identity in self._seen

    def add(self, identity: str) -> None:
        if identity not in self._seen:
            self._seen[identity] = None

    def maybe_collect(self, max_size: int = 50_000) -> int:
        dropped = 0
        while len(self._seen) > max_size:
            self._seen.popitem()
            dropped += 1
        if dropped:
            self._logger.debug(
                "seen_events_evicted",
                seen_events_dropped=dropped,
                seen_events_max_size=max_size,
            )
        return dropped
