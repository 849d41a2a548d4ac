# -*- coding: utf-8 -*-
"""Unit tests for AsyncHttpClient (single-attempt POST)."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import pytest

from pnl_listener.clients.http import AsyncHttpClient
from pnl_listener.exceptions import AggregatorTransportError


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def text(self) -> str:
        return self._text

    async def json(self, content_type: str | None = "application/json") -> Any:
        return json.loads(self._text)


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.closed = False
        self.posts: list[tuple[str, Any, Any]] = []

    def post(self, url: str, *, json: Any = None, headers: Any = None) -> _FakeResponse:
        self.posts.append((url, json, headers))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response

    async def close(self) -> None:
        self.closed = True


async def test_post_returns_status_and_json_body() -> None:
    session = _FakeSession(_FakeResponse(200, "12.5"))
    client = AsyncHttpClient(session=session)  # type: ignore[arg-type]
    response = await client.post("https://x.test/rpc", json={"a": 1}, headers={"h": "v"})
    assert response.ok
    assert response.status == 200
    assert response.body == 12.5
    assert session.posts == [("https://x.test/rpc", {"a": 1}, {"h": "v"})]


async def test_post_returns_error_status_without_raising() -> None:
    body = {"message": "boom", "code": "P0001"}
    session = _FakeSession(_FakeResponse(400, json.dumps(body)))
    response = await AsyncHttpClient(session=session).post("https://x.test")  # type: ignore[arg-type]
    assert not response.ok
    assert response.body == body


async def test_post_keeps_non_json_text() -> None:
    session = _FakeSession(_FakeResponse(502, "<html>bad gateway</html>"))
    response = await AsyncHttpClient(session=session).post("https://x.test")  # type: ignore[arg-type]
    assert response.body == "<html>bad gateway</html>"


async def test_empty_body_is_none() -> None:
    session = _FakeSession(_FakeResponse(204, ""))
    response = await AsyncHttpClient(session=session).post("https://x.test")  # type: ignore[arg-type]
    assert response.ok
    assert response.body is None


@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_post_wraps_transport_failures_and_does_not_retry(error: Exception) -> None:
    session = _FakeSession(error=error)
    with pytest.raises(AggregatorTransportError) as exc_info:
        await AsyncHttpClient(session=session).post("https://x.test")  # type: ignore[arg-type]
    assert exc_info.value.cause is error
    assert len(session.posts) == 1


async def test_aclose_leaves_injected_session_open() -> None:
    session = _FakeSession(_FakeResponse(200, "1"))
    client = AsyncHttpClient(session=session)  # type: ignore[arg-type]
    await client.aclose()
    assert session.closed is False
