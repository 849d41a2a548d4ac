# -*- coding: utf-8 -*-
"""Event bus and event types."""

from pnl_listener.events.bus import build_event_bus
from pnl_listener.events.pnl_events import (
    DuplicateEventSkippedEvent,
    PnlForwardedEvent,
    PnlForwardFailedEvent,
)

__all__ = [
    "DuplicateEventSkippedEvent",
    "PnlForwardFailedEvent",
    "PnlForwardedEvent",
    "build_event_bus",
]
