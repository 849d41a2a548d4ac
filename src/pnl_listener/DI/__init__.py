"""Dependency injection container."""

from pnl_listener.DI.container import Container

__all__ = ["Container"]
