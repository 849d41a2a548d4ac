"""Logging subpackage."""

from pnl_listener.logging.config import configure_logging

__all__ = ["configure_logging"]
