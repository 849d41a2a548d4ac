# -*- coding: utf-8 -*-
"""Event pipeline: dedup, delta computation and forwarding of MarginSettled events.

The WebSocket reader hands decoded events to submit(), which only enqueues.
A single consumer task takes them off the channel and calls process(), so the
dedup check-and-record always runs one event at a time. Forward calls are
started as background tasks: a slow aggregation call delays only its own
event, and several may be in flight at once.
"""

from __future__ import annotations

import asyncio
import structlog
from typing import TYPE_CHECKING, Any, Callable, Optional

from pnl_listener.events.pnl_events import (
    DuplicateEventSkippedEvent,
    PnlForwardedEvent,
    PnlForwardFailedEvent,
)
from pnl_listener.exceptions import QueueFull, QueueShutdown
from pnl_listener.models.margin_settled import MarginSettledEvent
from pnl_listener.queue import IAsyncQueue, QueueMessage
from pnl_listener.utils.formatting import format_signed_delta

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from pnl_listener.config import Settings
    from pnl_listener.persistence import ISeenEventRepository
    from pnl_listener.services.forwarding import PnlForwarder


class EventPipeline:
    """Consumes MarginSettled events: skip duplicates, compute delta, push to the aggregator.

    Lifecycle via start()/stop() or `async with pipeline`. stop() shuts the
    channel down immediately; queued events are dropped and in-flight
    forwards are left to finish (or not) on their own.
    """

    def __init__(
        self,
        queue: IAsyncQueue[QueueMessage[MarginSettledEvent]],
        seen_repository: ISeenEventRepository,
        forwarder: PnlForwarder,
        settings: Settings,
        *,
        event_bus: Optional[EventBus] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            queue: Channel fed by the connection manager through submit().
            seen_repository: Record of processed event identities.
            forwarder: Pushes deltas to the aggregation service.
            settings: Uses pipeline.decimals and dedup.max_size.
            event_bus: Optional bus receiving per-event outcome events.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._queue = queue
        self._seen = seen_repository
        self._forwarder = forwarder
        self._decimals = settings.pipeline.decimals
        self._max_seen = settings.dedup.max_size
        self._event_bus = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._running = False
        self._accepting = True
        self._worker_task: Optional[asyncio.Task[None]] = None
        self._in_flight: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> EventPipeline:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    @property
    def in_flight(self) -> int:
        """Number of forward calls not yet completed."""
        return len(self._in_flight)

    def submit(self, event: MarginSettledEvent) -> bool:
        """Enqueue an event for processing without blocking. Returns False if it was dropped."""
        if not self._accepting:
            return False
        try:
            self._queue.put_nowait(QueueMessage[MarginSettledEvent].create(payload=event))
            return True
        except QueueFull:
            self._logger.error(
                "pipeline_queue_full",
                event_identity=event.identity,
                trader=event.trader,
                block_number=event.block_number,
            )
        except QueueShutdown:
            self._logger.debug("pipeline_queue_closed", event_identity=event.identity)
        return False

    async def start(self) -> None:
        """Start the consumer task. Idempotent."""
        if self._running:
            return
        self._running = True
        self._worker_task = asyncio.create_task(self._consume_loop())

    def close_intake(self) -> None:
        """Refuse new events and drop queued ones. Synchronous, so safe from a signal handler."""
        if not self._accepting:
            return
        self._accepting = False
        self._queue.shutdown(immediate=True)

    async def stop(self) -> None:
        """Close intake and stop the consumer. Idempotent."""
        self.close_intake()
        if not self._running:
            return
        self._running = False
        task = self._worker_task
        self._worker_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._in_flight:
            self._logger.warning(
                "pipeline_stopped_with_forwards_in_flight",
                in_flight=len(self._in_flight),
            )

    async def drain(self) -> None:
        """Wait for queued events to be processed and for in-flight forwards to finish."""
        await self._queue.join()
        while pending := [t for t in self._in_flight if not t.done()]:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _consume_loop(self) -> None:
        self._logger.debug("pipeline_started")
        try:
            while True:
                message = await self._queue.get()
                try:
                    self.process(message.payload)
                except Exception as e:
                    self._logger.exception(
                        "pipeline_event_failed",
                        message_id=str(message.id),
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                finally:
                    self._queue.task_done()
        except QueueShutdown:
            self._logger.info("pipeline_stopped", reason="queue_shutdown")
        except asyncio.CancelledError:
            self._logger.debug("pipeline_cancelled")
            raise

    def process(self, event: MarginSettledEvent) -> Optional[asyncio.Task[None]]:
        """Handle one event. Returns the forward task, or None if nothing was forwarded.

        No await happens between the dedup lookup and the insert.
        """
        identity = event.identity
        if self._seen.contains(identity):
            self._logger.debug(
                "pipeline_duplicate_skipped",
                event_identity=identity,
                block_number=event.block_number,
            )
            self._dispatch(
                DuplicateEventSkippedEvent(identity=identity, block_number=event.block_number)
            )
            return None
        self._seen.add(identity)
        self._seen.maybe_collect(self._max_seen)

        try:
            delta = format_signed_delta(event.close_margin, event.open_margin, self._decimals)
        except (TypeError, ValueError) as e:
            self._report_failure(event, None, "format_error", str(e))
            return None

        task = asyncio.create_task(self._forward(event, delta))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _forward(self, event: MarginSettledEvent, delta: str) -> None:
        try:
            total = await self._forwarder.push(event.trader, delta)
        except Exception as e:
            self._report_failure(event, delta, "forward_error", str(e))
            return
        if total is None:
            self._report_failure(event, delta, "no_result", None)
            return
        self._logger.info(
            "pnl_forwarded",
            trader=event.trader,
            delta=delta,
            decimals=self._decimals,
            total=total,
            block_number=event.block_number,
            event_identity=event.identity,
            trader_won=event.trader_won,
            profit=str(event.profit),
        )
        self._dispatch(
            PnlForwardedEvent(
                trader=event.trader,
                delta=delta,
                total=total,
                identity=event.identity,
                block_number=event.block_number,
            )
        )

    def _report_failure(
        self,
        event: MarginSettledEvent,
        delta: Optional[str],
        reason: str,
        error_message: Optional[str],
    ) -> None:
        self._logger.error(
            "pnl_forward_failed",
            reason=reason,
            trader=event.trader,
            delta=delta,
            open_margin=str(event.open_margin),
            close_margin=str(event.close_margin),
            block_number=event.block_number,
            event_identity=event.identity,
            error_message=error_message,
        )
        self._dispatch(
            PnlForwardFailedEvent(
                reason=reason,
                trader=event.trader,
                delta=delta,
                identity=event.identity,
                block_number=event.block_number,
                error_message=error_message,
            )
        )

    def _dispatch(self, outcome: Any) -> None:
        if self._event_bus is None:
            return
        try:
            self._event_bus.dispatch(outcome)
        except Exception as e:
            self._logger.warning(
                "pipeline_outcome_dispatch_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
