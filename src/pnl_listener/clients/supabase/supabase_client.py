"""Supabase PostgREST client for RPC calls (POST /rest/v1/rpc/<function>)."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

import structlog

from pnl_listener.exceptions import AggregatorServiceError

if TYPE_CHECKING:
    from pnl_listener.clients.http import AsyncHttpClient
    from pnl_listener.config import Settings


def _error_message(body: Any, status: int) -> tuple[str, str | None]:
    """Extract (message, code) from a PostgREST error body."""
    if isinstance(body, dict):
        err = cast(dict[str, Any], body)
        message = err.get("message") or err.get("error") or err.get("details") or str(err)
        code = err.get("code")
        return str(message), (str(code) if code is not None else None)
    if body:
        return str(body), None
    return f"HTTP {status}", None


class SupabaseRpcClient:
    """Calls Postgres functions exposed by Supabase's REST API."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: HTTP client for POST requests.
            settings: Configuration (uses settings.supabase.url and key).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _rpc_url(self, function: str) -> str:
        return f"{self._settings.supabase.url.rstrip('/')}/rest/v1/rpc/{function}"

    def _headers(self) -> dict[str, str]:
        key = self._settings.supabase.key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def call_rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Invoke an RPC function with named parameters.

        Args:
            function: Postgres function name (e.g. "add_pnl").
            params: Named arguments, sent as the JSON body.

        Returns:
            The function's JSON result (e.g. the trader's new running total).

        Raises:
            AggregatorServiceError: If the service answered with an error status.
            AggregatorTransportError: If the request could not complete.
        """
        url = self._rpc_url(function)
        response = await self._http.post(url, json=params, headers=self._headers())
        if not response.ok:
            message, code = _error_message(response.body, response.status)
            raise AggregatorServiceError(
                message,
                url=url,
                status_code=response.status,
                code=code,
            )
        return response.body
