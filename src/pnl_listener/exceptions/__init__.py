"""Exceptions subpackage."""

from pnl_listener.exceptions.exceptions import (
    AggregatorError,
    AggregatorServiceError,
    AggregatorTransportError,
    ConfigError,
    EventDecodeError,
    InvalidConfigError,
    ListenerError,
    MissingRequiredConfigError,
    SubscriptionError,
    TransportError,
)
from pnl_listener.exceptions.queue_exceptions import (
    QueueError,
    QueueFull,
    QueueShutdown,
)

__all__ = [
    "AggregatorError",
    "AggregatorServiceError",
    "AggregatorTransportError",
    "ConfigError",
    "EventDecodeError",
    "InvalidConfigError",
    "ListenerError",
    "MissingRequiredConfigError",
    "SubscriptionError",
    "TransportError",
    "QueueError",
    "QueueFull",
    "QueueShutdown",
]
