# -*- coding: utf-8 -*-
"""ListenerService: the one long-lived object owning connection, pipeline and dedup state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from pnl_listener.utils.validation import mask_address

if TYPE_CHECKING:
    from pnl_listener.clients.http import AsyncHttpClient
    from pnl_listener.config import Settings
    from pnl_listener.services.connection import ConnectionManager
    from pnl_listener.services.pipeline import EventPipeline
    from pnl_listener.services.stats import ListenerStats


class ListenerService:
    """Starts the pipeline before the subscription and stops them in reverse order."""

    def __init__(
        self,
        settings: Settings,
        connection_manager: ConnectionManager,
        pipeline: EventPipeline,
        http_client: AsyncHttpClient,
        *,
        stats: Optional[ListenerStats] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._connection = connection_manager
        self._pipeline = pipeline
        self._http = http_client
        self._stats = stats
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._started = False

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def pipeline(self) -> EventPipeline:
        return self._pipeline

    async def start(self) -> None:
        """Start consuming, then subscribe. Idempotent."""
        if self._started:
            return
        self._started = True
        if self._stats is not None:
            self._stats.start()
        self._connection.set_event_handler(self._pipeline.submit)
        await self._pipeline.start()
        await self._connection.start()
        self._logger.info(
            "listener_started",
            ws_url=self._settings.chain.wss_url,
            contract_masked=mask_address(self._settings.chain.contract),
            decimals=self._settings.pipeline.decimals,
            dedup_strategy=self._settings.dedup.strategy,
            dedup_max_size=self._settings.dedup.max_size,
        )

    def halt(self) -> None:
        """Synchronously stop event intake (used from the signal handler before stop())."""
        self._connection.detach_handlers()
        self._pipeline.close_intake()

    async def stop(self) -> None:
        """Tear down the subscription first so nothing new arrives, then the pipeline. Idempotent."""
        if not self._started:
            return
        self._started = False
        await self._connection.shutdown()
        await self._pipeline.stop()
        await self._http.aclose()
        if self._stats is not None:
            self._stats.stop()
        self._logger.info("listener_stopped")
