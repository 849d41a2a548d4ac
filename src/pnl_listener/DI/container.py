# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from pnl_listener.clients.http import AsyncHttpClient
from pnl_listener.clients.supabase import SupabaseRpcClient
from pnl_listener.config import Settings, get_settings
from pnl_listener.events.bus import build_event_bus
from pnl_listener.models.margin_settled import MarginSettledEvent
from pnl_listener.persistence import (
    FifoSeenEventRepository,
    ISeenEventRepository,
    InMemorySeenEventRepository,
)
from pnl_listener.queue import InMemoryQueue, QueueMessage
from pnl_listener.services.connection import ConnectionManager
from pnl_listener.services.forwarding import PnlForwarder
from pnl_listener.services.listener import ListenerService
from pnl_listener.services.pipeline import EventPipeline
from pnl_listener.services.stats import ListenerStats


def _build_event_queue(settings: Settings) -> InMemoryQueue[QueueMessage[MarginSettledEvent]]:
    """Build the event channel with size from settings."""
    return InMemoryQueue[QueueMessage[MarginSettledEvent]](maxsize=settings.pipeline.queue_size)


def _build_seen_repository(settings: Settings) -> ISeenEventRepository:
    """Pick the dedup strategy from settings.dedup.strategy."""
    if settings.dedup.strategy == "clear":
        return InMemorySeenEventRepository()
    return FifoSeenEventRepository(max_size=settings.dedup.max_size)


def _build_http_client(settings: Settings) -> AsyncHttpClient:
    return AsyncHttpClient(timeout_seconds=settings.supabase.timeout_seconds)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, clients, pipeline, connection and listener."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(_build_http_client, config)

    supabase_client = providers.Singleton(
        SupabaseRpcClient,
        http_client=http_client,
        settings=config,
    )

    event_bus = providers.Singleton(build_event_bus, config)

    event_queue = providers.Singleton(_build_event_queue, config)

    seen_event_repository = providers.Singleton(_build_seen_repository, config)

    pnl_forwarder = providers.Singleton(
        PnlForwarder,
        rpc_client=supabase_client,
        settings=config,
    )

    event_pipeline = providers.Singleton(
        EventPipeline,
        queue=event_queue,
        seen_repository=seen_event_repository,
        forwarder=pnl_forwarder,
        settings=config,
        event_bus=event_bus,
    )

    connection_manager = providers.Singleton(
        ConnectionManager,
        settings=config,
    )

    listener_stats = providers.Singleton(
        ListenerStats,
        event_bus=event_bus,
    )

    listener_service = providers.Singleton(
        ListenerService,
        settings=config,
        connection_manager=connection_manager,
        pipeline=event_pipeline,
        http_client=http_client,
        stats=listener_stats,
    )
