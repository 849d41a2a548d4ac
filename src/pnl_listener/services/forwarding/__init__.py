"""Aggregation forwarding service."""

from pnl_listener.services.forwarding.pnl_forwarder import PnlForwarder

__all__ = ["PnlForwarder"]
