"""Services: connection, pipeline, forwarding, listener lifecycle, shutdown."""

from pnl_listener.services.connection import ConnectionManager, ConnectionState
from pnl_listener.services.forwarding import PnlForwarder
from pnl_listener.services.listener import ListenerService
from pnl_listener.services.pipeline import EventPipeline
from pnl_listener.services.shutdown import ShutdownCoordinator
from pnl_listener.services.stats import ListenerStats, StatsSnapshot

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "EventPipeline",
    "ListenerService",
    "ListenerStats",
    "PnlForwarder",
    "ShutdownCoordinator",
    "StatsSnapshot",
]
