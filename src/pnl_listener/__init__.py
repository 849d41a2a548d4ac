"""MarginSettled PnL listener: on-chain subscription, dedup and Supabase aggregation."""

from pnl_listener.config import get_settings
from pnl_listener.DI import Container
from pnl_listener.services import ConnectionManager, EventPipeline, ListenerService

__version__ = "0.1.0"
__all__ = [
    "ConnectionManager",
    "Container",
    "EventPipeline",
    "ListenerService",
    "get_settings",
]
