# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import aiohttp
import pytest
from eth_abi import encode as abi_encode
from eth_utils import to_checksum_address

from pnl_listener.clients.chain.abi import MARGIN_SETTLED_TOPIC
from pnl_listener.models.margin_settled import MarginSettledEvent


@pytest.fixture
def trader() -> str:
    """Default trader address (checksum form) used by tests."""
    return to_checksum_address("0x2d27b6e21b3d4d7c9a43fdf58f12345678907706")


@pytest.fixture
def contract() -> str:
    """Default MarginSettled emitter address."""
    return "0x9a88d07850723267db386c681646217af7e220d7"


@pytest.fixture
def settings_factory(contract: str) -> Callable[..., Any]:
    """Minimal settings object with the sections services read; override per test."""

    def _build(**overrides: Any) -> Any:
        return SimpleNamespace(
            chain=SimpleNamespace(
                wss_url=overrides.pop("wss_url", "wss://node.test"),
                contract=overrides.pop("contract", contract),
                reconnect_delay_seconds=overrides.pop("reconnect_delay_seconds", 0.01),
                subscribe_timeout_seconds=overrides.pop("subscribe_timeout_seconds", 1.0),
                heartbeat_seconds=overrides.pop("heartbeat_seconds", 30.0),
            ),
            supabase=SimpleNamespace(
                url=overrides.pop("supabase_url", "https://project.supabase.test/"),
                key=overrides.pop("supabase_key", "service-role-key"),
                rpc_function=overrides.pop("rpc_function", "add_pnl"),
                timeout_seconds=15.0,
            ),
            pipeline=SimpleNamespace(
                decimals=overrides.pop("decimals", 6),
                queue_size=overrides.pop("queue_size", 100),
            ),
            dedup=SimpleNamespace(
                max_size=overrides.pop("max_size", 50_000),
                strategy=overrides.pop("strategy", "fifo"),
            ),
        )

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Any]) -> Any:
    return settings_factory()


@pytest.fixture
def event_factory(trader: str) -> Callable[..., MarginSettledEvent]:
    """Build decoded MarginSettledEvent with defaults and easy overrides."""

    def _build(**overrides: Any) -> MarginSettledEvent:
        return MarginSettledEvent(
            trader=overrides.pop("trader", trader),
            open_margin=overrides.pop("open_margin", 1_000_000),
            close_margin=overrides.pop("close_margin", 1_500_000),
            profit=overrides.pop("profit", 500_000),
            trader_won=overrides.pop("trader_won", True),
            transaction_hash=overrides.pop("transaction_hash", "0x" + "ab" * 32),
            log_index=overrides.pop("log_index", 0),
            block_number=overrides.pop("block_number", 100),
        )

    return _build


@pytest.fixture
def margin_log_factory(trader: str, contract: str) -> Callable[..., dict[str, Any]]:
    """Build a raw JSON-RPC log object as delivered by eth_subscribe("logs")."""

    def _build(**overrides: Any) -> dict[str, Any]:
        log_trader = overrides.pop("trader", trader)
        data = abi_encode(
            ["uint256", "uint256", "uint256", "bool"],
            [
                overrides.pop("open_margin", 1_000_000),
                overrides.pop("close_margin", 1_500_000),
                overrides.pop("profit", 500_000),
                overrides.pop("trader_won", True),
            ],
        )
        log: dict[str, Any] = {
            "address": contract,
            "topics": [
                MARGIN_SETTLED_TOPIC,
                "0x" + "00" * 12 + log_trader[2:].lower(),
            ],
            "data": "0x" + data.hex(),
            "blockNumber": hex(overrides.pop("block_number", 100)),
            "transactionHash": overrides.pop("transaction_hash", "0x" + "ab" * 32),
            "logIndex": hex(overrides.pop("log_index", 0)),
            "removed": overrides.pop("removed", False),
        }
        log.update(overrides)
        return log

    return _build


class FakeWebSocket:
    """In-memory stand-in for aiohttp.ClientWebSocketResponse.

    Answers eth_subscribe with `subscription_id` (unless `ack` is False or
    `reject` is set) and lets tests push notifications or drop the connection.
    """

    def __init__(
        self,
        subscription_id: str = "0xsub1",
        *,
        ack: bool = True,
        reject: Any = None,
    ) -> None:
        self.subscription_id = subscription_id
        self.ack = ack
        self.reject = reject
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.close_code: int | None = None
        self.close_calls = 0
        self._incoming: asyncio.Queue[Any] = asyncio.Queue()

    @staticmethod
    def _text(payload: dict[str, Any]) -> Any:
        return SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=json.dumps(payload), extra=None)

    async def send_json(self, payload: dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(payload)
        if payload.get("method") == "eth_subscribe" and self.ack:
            if self.reject is not None:
                reply = {"jsonrpc": "2.0", "id": payload["id"], "error": self.reject}
            else:
                reply = {"jsonrpc": "2.0", "id": payload["id"], "result": self.subscription_id}
            self._incoming.put_nowait(self._text(reply))

    async def receive(self) -> Any:
        return await self._incoming.get()

    def exception(self) -> BaseException | None:
        return None

    async def close(self, *, code: int = 1000, message: bytes = b"") -> bool:
        self.close_calls += 1
        if self.closed:
            return False
        self.closed = True
        self.close_code = code
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None, extra=None))
        return True

    def push_log(self, log: dict[str, Any], subscription_id: str | None = None) -> None:
        self._incoming.put_nowait(
            self._text(
                {
                    "jsonrpc": "2.0",
                    "method": "eth_subscription",
                    "params": {
                        "subscription": subscription_id or self.subscription_id,
                        "result": log,
                    },
                }
            )
        )

    def push_raw(self, data: str) -> None:
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=data, extra=None))

    def drop(self, code: int = 1006) -> None:
        """Simulate the server closing the connection."""
        self.closed = True
        self.close_code = code
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSE, data=code, extra=None))


class FakeConnector:
    """ws_connect replacement handing out FakeWebSocket instances in order."""

    def __init__(self, sockets: list[Any] | None = None, *, failures: int = 0) -> None:
        self._sockets = list(sockets or [])
        self.failures = failures
        self.calls: list[str] = []
        self.opened: list[FakeWebSocket] = []

    async def __call__(self, url: str) -> FakeWebSocket:
        self.calls.append(url)
        if self.failures > 0:
            self.failures -= 1
            raise aiohttp.ClientConnectionError("connection refused")
        if self._sockets:
            ws = self._sockets.pop(0)
        else:
            ws = FakeWebSocket(subscription_id=f"0xsub{len(self.opened) + 1}")
        self.opened.append(ws)
        return ws


@pytest.fixture
def fake_ws_factory() -> Callable[..., FakeWebSocket]:
    return FakeWebSocket


@pytest.fixture
def fake_connector_factory() -> Callable[..., FakeConnector]:
    return FakeConnector


class FakeEventBus:
    """Minimal event bus fake for unit tests."""

    def __init__(self) -> None:
        self.handlers: dict[str, list[Any]] = {}
        self.dispatched: list[Any] = []

    def on(self, event_type: type[Any], handler: Any) -> None:
        self.handlers.setdefault(event_type.__name__, []).append(handler)

    def dispatch(self, event: Any) -> Any:
        self.dispatched.append(event)
        for handler in self.handlers.get(type(event).__name__, []):
            handler(event)
        return event


@pytest.fixture
def event_bus() -> FakeEventBus:
    return FakeEventBus()


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the loop until predicate() holds or timeout expires."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


@pytest.fixture
def until() -> Callable[..., Any]:
    return wait_until
