"""Upstream connection management."""

from pnl_listener.services.connection.connection_manager import (
    ConnectionManager,
    ConnectionState,
)

__all__ = ["ConnectionManager", "ConnectionState"]
