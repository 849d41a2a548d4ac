"""ListenerStats: counts pipeline outcomes from the event bus."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from pnl_listener.events.pnl_events import (
    DuplicateEventSkippedEvent,
    PnlForwardedEvent,
    PnlForwardFailedEvent,
)

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]


@dataclass(slots=True)
class StatsSnapshot:
    forwarded: int = 0
    failed: int = 0
    duplicates: int = 0
    last_block: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ListenerStats:
    """Subscribes to pipeline outcome events and keeps running counters."""

    def __init__(
        self,
        event_bus: Any,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._event_bus: "EventBus" = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._stats = StatsSnapshot()

    def start(self) -> None:
        """Subscribe to the outcome events."""
        self._event_bus.on(PnlForwardedEvent, self._on_forwarded)
        self._event_bus.on(PnlForwardFailedEvent, self._on_failed)
        self._event_bus.on(DuplicateEventSkippedEvent, self._on_duplicate)

    def stop(self) -> None:
        """Unsubscribe and log the final counters."""
        handlers = getattr(self._event_bus, "handlers", {})
        for event_type, handler in (
            (PnlForwardedEvent, self._on_forwarded),
            (PnlForwardFailedEvent, self._on_failed),
            (DuplicateEventSkippedEvent, self._on_duplicate),
        ):
            key = event_type.__name__
            if key in handlers:
                handlers[key] = [h for h in handlers[key] if h != handler]
        self._logger.info("listener_stats", **self._stats.to_dict())

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(**self._stats.to_dict())

    def _track_block(self, block_number: int) -> None:
        if self._stats.last_block is None or block_number > self._stats.last_block:
            self._stats.last_block = block_number

    def _on_forwarded(self, event: PnlForwardedEvent) -> None:
        self._stats.forwarded += 1
        self._track_block(event.block_number)

    def _on_failed(self, event: PnlForwardFailedEvent) -> None:
        self._stats.failed += 1
        self._track_block(event.block_number)

    def _on_duplicate(self, event: DuplicateEventSkippedEvent) -> None:
        self._stats.duplicates += 1
