"""Custom exceptions for the listener: config, transport, decoding, aggregation."""

from __future__ import annotations


class ListenerError(Exception):
    """Base exception for pnl-listener errors."""

    pass


class ConfigError(ListenerError):
    """Base error for unusable configuration (fatal at startup)."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when a configuration value is present but malformed."""

    pass


class MissingRequiredConfigError(ConfigError):
    """Raised when a required configuration value is missing."""

    def __init__(self, *names: str) -> None:
        super().__init__(f"Missing required configuration: {', '.join(names)}")
        self.names = names


class TransportError(ListenerError):
    """Raised when the upstream WebSocket connection cannot be used."""

    pass


class SubscriptionError(TransportError):
    """Raised when eth_subscribe is rejected or not acknowledged in time."""

    pass


class EventDecodeError(ListenerError):
    """Raised when a log notification does not match the MarginSettled layout."""

    pass


class AggregatorError(ListenerError):
    """Base error for calls to the aggregation service."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class AggregatorServiceError(AggregatorError):
    """The service answered with an error (e.g. PostgREST 4xx/5xx body)."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=status_code)
        self.code = code


class AggregatorTransportError(AggregatorError):
    """The call itself could not complete (connection, timeout, bad payload)."""

    pass
