"""Repository interfaces."""

from pnl_listener.persistence.interfaces.seen_event_repository import ISeenEventRepository

__all__ = ["ISeenEventRepository"]
