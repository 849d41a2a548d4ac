# -*- coding: utf-8 -*-
"""Async HTTP client for JSON APIs (single attempt, no retries)."""

from __future__ import annotations

import asyncio
import uuid
import aiohttp
import structlog
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from pnl_listener.exceptions import AggregatorTransportError


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status code plus decoded body (JSON when parseable, else text or None)."""

    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class AsyncHttpClient:
    """Thin aiohttp wrapper. Non-2xx answers are returned, not raised.

    Requests are not retried: the calls made through this client mutate
    remote state and are not idempotent.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout_seconds: Total timeout per request.
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session (call aclose() when done).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def post(
        self,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """POST a JSON body once and return the status and decoded body.

        Raises:
            AggregatorTransportError: If the request could not complete
                (connection error, timeout).
        """
        request_id = uuid.uuid4().hex[:12]
        with bound_contextvars(http_url=url, http_request_id=request_id):
            try:
                session = await self._get_session()
                async with session.post(url, json=json or {}, headers=headers) as response:
                    text = await response.text()
                    body: Any = None
                    if text:
                        try:
                            body = await response.json(content_type=None)
                        except ValueError:
                            body = text
                    self._logger.debug(
                        "http_post_completed",
                        http_status_code=response.status,
                    )
                    return HttpResponse(status=response.status, body=body)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self._logger.warning(
                    "http_post_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise AggregatorTransportError(
                    f"POST failed: {url}",
                    url=url,
                    cause=e,
                ) from e
