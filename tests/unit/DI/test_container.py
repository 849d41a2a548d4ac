# -*- coding: utf-8 -*-
"""Unit tests for the dependency injection container wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from dependency_injector import providers

from pnl_listener.DI import Container
from pnl_listener.config import Settings
from pnl_listener.persistence import FifoSeenEventRepository, InMemorySeenEventRepository
from pnl_listener.services import ListenerService


def _container(event_bus: Any, **sections: Any) -> Container:
    container = Container()
    container.config.override(providers.Object(Settings.from_env(**sections)))
    container.event_bus.override(providers.Object(event_bus))
    return container


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)


async def test_fifo_strategy_by_default(event_bus: Any) -> None:
    container = _container(event_bus, dedup={"max_size": 10})
    repo = container.seen_event_repository()
    assert isinstance(repo, FifoSeenEventRepository)


async def test_clear_strategy_selects_set_repository(event_bus: Any) -> None:
    container = _container(event_bus, dedup={"strategy": "clear"})
    assert isinstance(container.seen_event_repository(), InMemorySeenEventRepository)


async def test_listener_service_shares_singletons(event_bus: Any) -> None:
    container = _container(event_bus)
    listener = container.listener_service()
    assert isinstance(listener, ListenerService)
    assert listener.pipeline is container.event_pipeline()
    assert listener.connection is container.connection_manager()
    assert container.listener_service() is listener
    await container.http_client().aclose()
