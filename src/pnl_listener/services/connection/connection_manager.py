# -*- coding: utf-8 -*-
"""WebSocket connection and MarginSettled log subscription, with fixed-delay reconnect.

Owns the only transport handle and the only live subscription. Notifications
are decoded here and handed to the registered handler; everything past that
point belongs to the event pipeline.

States: DISCONNECTED -> CONNECTING -> CONNECTED -> (close/error) -> DISCONNECTED ...
SHUTTING_DOWN is terminal and only entered through shutdown().
"""

from __future__ import annotations

import asyncio
import itertools
import json
import aiohttp
import structlog
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from pnl_listener.clients.chain.abi import build_logs_filter, decode_margin_settled
from pnl_listener.exceptions import EventDecodeError, SubscriptionError, TransportError
from pnl_listener.models.margin_settled import MarginSettledEvent
from pnl_listener.utils.validation import mask_address

if TYPE_CHECKING:
    from pnl_listener.config import Settings

EventHandler = Callable[[MarginSettledEvent], Any]
WsConnector = Callable[[str], Awaitable[Any]]

_CLOSED_TYPES = (
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
)


class ConnectionState(str, Enum):
    """Connection lifecycle state."""

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    SHUTTING_DOWN = "SHUTTING_DOWN"


class ConnectionManager:
    """Keeps exactly one eth_subscribe("logs") subscription alive on the configured node.

    connect() replaces any existing session, disconnect() removes handlers and
    closes the socket, reconnect() does both with a fixed delay in between.
    A transport close or error schedules one reconnect; a reconnect that is
    already pending absorbs further closes.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        on_event: Optional[EventHandler] = None,
        ws_connect: Optional[WsConnector] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the manager.

        Args:
            settings: Uses settings.chain (wss_url, contract, delays, heartbeat).
            on_event: Handler installed with every subscription (e.g. EventPipeline.submit).
            ws_connect: Optional factory url -> websocket; defaults to aiohttp ws_connect
                on a session owned by this manager.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        chain = settings.chain
        self._url = chain.wss_url
        self._contract = chain.contract
        self._reconnect_delay = chain.reconnect_delay_seconds
        self._subscribe_timeout = chain.subscribe_timeout_seconds
        self._heartbeat = chain.heartbeat_seconds
        self._on_event = on_event
        self._ws_connect = ws_connect or self._aiohttp_ws_connect
        self._logger = get_logger(logger_name or self.__class__.__name__)

        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Any = None
        self._subscription_id: Optional[str] = None
        self._handlers: list[EventHandler] = []
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._reconnect_task: Optional[asyncio.Task[None]] = None
        self._request_ids = itertools.count(1)
        self._subscriptions_installed = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def subscription_id(self) -> Optional[str]:
        return self._subscription_id

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    @property
    def subscriptions_installed(self) -> int:
        """How many subscriptions have been installed since construction."""
        return self._subscriptions_installed

    def set_event_handler(self, handler: EventHandler) -> None:
        """Handler installed on the next connect()."""
        self._on_event = handler

    def detach_handlers(self) -> None:
        """Stop delivering notifications without touching the socket."""
        self._handlers.clear()
        self._on_event = None

    async def _aiohttp_ws_connect(self, url: str) -> aiohttp.ClientWebSocketResponse:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return await self._session.ws_connect(url, heartbeat=self._heartbeat)

    async def start(self) -> None:
        """First connection. A failure schedules a reconnect instead of raising."""
        try:
            await self.connect()
        except TransportError as e:
            self._logger.warning(
                "ws_connect_failed",
                ws_url=self._url,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            self._schedule_reconnect()

    async def connect(self) -> None:
        """Open the socket and install the subscription, tearing down any prior session first.

        Raises:
            TransportError: If the socket cannot be opened or used.
            SubscriptionError: If the node rejects or does not acknowledge eth_subscribe.
        """
        if self._state is ConnectionState.SHUTTING_DOWN:
            return
        if self._ws is not None or self._handlers or self._reader_task is not None:
            await self.disconnect()

        self._state = ConnectionState.CONNECTING
        try:
            ws = await self._ws_connect(self._url)
        except asyncio.CancelledError:
            self._state = ConnectionState.DISCONNECTED
            raise
        except Exception as e:
            self._state = ConnectionState.DISCONNECTED
            raise TransportError(f"cannot connect to {self._url}: {e}") from e
        self._ws = ws
        self._logger.info("ws_connected", ws_url=self._url)

        try:
            subscription_id = await self._subscribe(ws)
        except asyncio.CancelledError:
            await self.disconnect()
            raise
        except SubscriptionError:
            await self.disconnect()
            raise
        except Exception as e:
            await self.disconnect()
            raise TransportError(f"subscribe failed: {e}") from e

        if self._state is ConnectionState.SHUTTING_DOWN or self._ws is not ws:
            return
        self._subscription_id = subscription_id
        self._handlers = [self._on_event] if self._on_event is not None else []
        self._subscriptions_installed += 1
        self._state = ConnectionState.CONNECTED
        self._reader_task = asyncio.create_task(self._read_loop(ws, subscription_id))
        self._logger.info(
            "ws_subscribed",
            subscription_id=subscription_id,
            contract_masked=mask_address(self._contract),
        )

    async def _subscribe(self, ws: Any) -> str:
        request_id = next(self._request_ids)
        await ws.send_json(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "method": "eth_subscribe",
                "params": ["logs", build_logs_filter(self._contract)],
            }
        )
        try:
            async with asyncio.timeout(self._subscribe_timeout):
                while True:
                    msg = await ws.receive()
                    if msg.type != aiohttp.WSMsgType.TEXT:
                        raise SubscriptionError(f"socket closed while subscribing ({msg.type})")
                    try:
                        reply = json.loads(msg.data)
                    except ValueError:
                        continue
                    if not isinstance(reply, dict) or reply.get("id") != request_id:
                        continue
                    if reply.get("error") is not None:
                        raise SubscriptionError(f"eth_subscribe rejected: {reply['error']}")
                    result = reply.get("result")
                    if not result:
                        raise SubscriptionError("eth_subscribe returned no subscription id")
                    return str(result)
        except TimeoutError as e:
            raise SubscriptionError(
                f"no eth_subscribe response within {self._subscribe_timeout}s"
            ) from e

    async def _read_loop(self, ws: Any, subscription_id: str) -> None:
        error: Optional[BaseException] = None
        try:
            while True:
                msg = await ws.receive()
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._handle_text(msg.data, subscription_id)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    error = ws.exception()
                    break
                elif msg.type in _CLOSED_TYPES:
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = e

        if error is not None:
            self._logger.warning(
                "ws_error",
                error_type=type(error).__name__,
                error_message=str(error),
            )
        self._logger.warning("ws_closed", ws_close_code=getattr(ws, "close_code", None))
        self._on_transport_lost(ws)

    def _handle_text(self, data: str, subscription_id: str) -> None:
        try:
            message = json.loads(data)
        except ValueError:
            self._logger.warning("ws_invalid_message", payload_size=len(data))
            return
        if not isinstance(message, dict) or message.get("method") != "eth_subscription":
            return
        params = message.get("params") or {}
        if params.get("subscription") != subscription_id:
            self._logger.debug(
                "ws_stale_notification_dropped",
                subscription_id=params.get("subscription"),
            )
            return
        log = params.get("result") or {}
        if log.get("removed"):
            self._logger.warning(
                "ws_removed_log_skipped",
                transaction_hash=log.get("transactionHash"),
                log_index=log.get("logIndex"),
            )
            return
        try:
            event = decode_margin_settled(log)
        except EventDecodeError as e:
            self._logger.warning(
                "ws_decode_failed",
                transaction_hash=log.get("transactionHash"),
                log_index=log.get("logIndex"),
                error_message=str(e),
            )
            return
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                self._logger.exception(
                    "ws_handler_failed",
                    event_identity=event.identity,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )

    def _on_transport_lost(self, ws: Any) -> None:
        if ws is not self._ws:
            return
        self._handlers.clear()
        self._subscription_id = None
        self._reader_task = None
        if self._state is not ConnectionState.SHUTTING_DOWN:
            self._state = ConnectionState.DISCONNECTED
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if self._state is ConnectionState.SHUTTING_DOWN:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._logger.info("ws_reconnect_scheduled", delay_seconds=self._reconnect_delay)
        self._reconnect_task = asyncio.create_task(self.reconnect())

    async def reconnect(self) -> None:
        """disconnect(), wait the fixed delay, connect(); repeats until connected or shut down."""
        while self._state is not ConnectionState.SHUTTING_DOWN:
            await self.disconnect()
            await asyncio.sleep(self._reconnect_delay)
            if self._state is ConnectionState.SHUTTING_DOWN:
                return
            try:
                await self.connect()
                return
            except TransportError as e:
                self._logger.warning(
                    "ws_reconnect_failed",
                    ws_url=self._url,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    delay_seconds=self._reconnect_delay,
                )

    async def disconnect(self) -> None:
        """Remove handlers, end the subscription and close the socket. Safe when already closed."""
        self._handlers.clear()
        subscription_id = self._subscription_id
        self._subscription_id = None
        reader = self._reader_task
        self._reader_task = None
        ws = self._ws
        self._ws = None
        if self._state is not ConnectionState.SHUTTING_DOWN:
            self._state = ConnectionState.DISCONNECTED

        if reader is not None and reader is not asyncio.current_task() and not reader.done():
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass

        if ws is None or getattr(ws, "closed", False):
            return
        try:
            if subscription_id is not None:
                await ws.send_json(
                    {
                        "jsonrpc": "2.0",
                        "id": next(self._request_ids),
                        "method": "eth_unsubscribe",
                        "params": [subscription_id],
                    }
                )
            await ws.close(code=1000, message=b"manual close")
        except Exception as e:
            self._logger.debug(
                "ws_close_ignored",
                error_type=type(e).__name__,
                error_message=str(e),
            )

    async def shutdown(self) -> None:
        """Enter SHUTTING_DOWN, cancel pending reconnects, disconnect and release the session."""
        self._state = ConnectionState.SHUTTING_DOWN
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.disconnect()
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._logger.info("ws_shutdown_complete")
