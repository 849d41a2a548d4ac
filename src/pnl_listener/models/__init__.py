"""Domain models."""

from pnl_listener.models.margin_settled import MarginSettledEvent

__all__ = ["MarginSettledEvent"]
