"""Per-event outcomes emitted by the event pipeline."""

from __future__ import annotations

from typing import Any, Literal

from bubus import BaseEvent  # type: ignore[import-untyped]


class PnlForwardedEvent(BaseEvent[None]):
    """A delta was accepted by the aggregation service."""

    trader: str
    delta: str
    total: Any
    """New running total as returned by the service."""

    identity: str
    block_number: int


class PnlForwardFailedEvent(BaseEvent[None]):
    """A delta could not be applied and was dropped (no retry).

    Carries what is needed to reconcile the trader's total by hand.
    """

    reason: Literal["no_result", "format_error", "forward_error"]
    trader: str
    delta: str | None = None
    identity: str
    block_number: int
    error_message: str | None = None


class DuplicateEventSkippedEvent(BaseEvent[None]):
    """A notification whose identity was already processed was ignored."""

    identity: str
    block_number: int
