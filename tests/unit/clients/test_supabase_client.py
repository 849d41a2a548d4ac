# -*- coding: utf-8 -*-
"""Unit tests for SupabaseRpcClient."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from pnl_listener.clients.http import HttpResponse
from pnl_listener.clients.supabase import SupabaseRpcClient
from pnl_listener.exceptions import AggregatorServiceError, AggregatorTransportError


def _client(http: Any, settings: Any) -> SupabaseRpcClient:
    return SupabaseRpcClient(http_client=http, settings=settings)


async def test_call_rpc_posts_named_params_with_auth_headers(settings: Any) -> None:
    http = AsyncMock()
    http.post.return_value = HttpResponse(status=200, body="42.500000")
    result = await _client(http, settings).call_rpc(
        "add_pnl", {"p_trader": "0xabc", "p_delta_x6": "1.000000"}
    )

    assert result == "42.500000"
    http.post.assert_awaited_once()
    args, kwargs = http.post.call_args
    assert args[0] == "https://project.supabase.test/rest/v1/rpc/add_pnl"
    assert kwargs["json"] == {"p_trader": "0xabc", "p_delta_x6": "1.000000"}
    assert kwargs["headers"]["apikey"] == "service-role-key"
    assert kwargs["headers"]["Authorization"] == "Bearer service-role-key"


async def test_call_rpc_maps_postgrest_error_body(settings: Any) -> None:
    http = AsyncMock()
    http.post.return_value = HttpResponse(
        status=404,
        body={"code": "PGRST202", "message": "Could not find the function public.add_pnl"},
    )
    with pytest.raises(AggregatorServiceError) as exc_info:
        await _client(http, settings).call_rpc("add_pnl", {})
    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "PGRST202"
    assert "add_pnl" in str(exc_info.value)


async def test_call_rpc_error_without_body_uses_status(settings: Any) -> None:
    http = AsyncMock()
    http.post.return_value = HttpResponse(status=503, body=None)
    with pytest.raises(AggregatorServiceError, match="HTTP 503"):
        await _client(http, settings).call_rpc("add_pnl", {})


async def test_call_rpc_propagates_transport_errors(settings: Any) -> None:
    http = AsyncMock()
    http.post.side_effect = AggregatorTransportError("POST failed")
    with pytest.raises(AggregatorTransportError):
        await _client(http, settings).call_rpc("add_pnl", {})
