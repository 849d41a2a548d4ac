"""Outcome event bus (bubus)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bubus import EventBus  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from pnl_listener.config import Settings

# Outcome events are counted as they arrive; a short history is enough for debugging.
_MAX_HISTORY = 100


def build_event_bus(settings: Settings) -> EventBus:
    """Create the bus carrying pipeline outcomes, named after the app (no WAL)."""
    name = "".join(part.capitalize() for part in settings.app.app_name.replace("_", "-").split("-"))
    return EventBus(name=name or "PnlListener", max_history_size=_MAX_HISTORY, wal_path=None)
