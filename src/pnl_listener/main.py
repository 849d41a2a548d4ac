# -*- coding: utf-8 -*-
"""
Entry point for the MarginSettled PnL listener.

Orchestrates: logging, settings check, container, listener service, shutdown (SIGINT or CancelledError).
Events flow: WebSocket subscription -> channel -> pipeline (dedup, delta) -> Supabase add_pnl.

Run with: python -m pnl_listener.main  (or the `pnl-listener` script)
"""
from __future__ import annotations

import asyncio
import sys
import structlog
from typing import Any
from dependency_injector import providers
from pydantic import ValidationError

from pnl_listener.DI import Container
from pnl_listener.config import Settings, get_settings
from pnl_listener.exceptions import (
    ConfigError,
    InvalidConfigError,
    MissingRequiredConfigError,
)
from pnl_listener.logging.config import configure_logging
from pnl_listener.services.shutdown import ShutdownCoordinator
from pnl_listener.utils.validation import is_hex_address


async def _do_shutdown(listener: Any, logger: Any) -> None:
    """Clean shutdown. Safe to call on normal shutdown or CancelledError."""
    await listener.stop()
    logger.info("main_shutdown_complete")


async def run(
    *,
    settings: Settings | None = None,
    container: Container | None = None,
    coordinator: ShutdownCoordinator | None = None,
) -> None:
    logger = structlog.get_logger("main")
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.error("main_invalid_config", fields=fields, error_count=e.error_count())
            raise InvalidConfigError(f"Invalid configuration: {', '.join(fields) or e}") from e
    configure_logging(settings)
    missing = settings.missing_required()
    if missing:
        logger.error(
            "main_missing_required_config",
            missing=missing,
            message=f"Missing {', '.join(missing)} in environment or .env",
        )
        raise MissingRequiredConfigError(*missing)
    if not is_hex_address(settings.chain.contract):
        logger.error(
            "main_invalid_config",
            contract=settings.chain.contract,
            message="CONTRACT must be a 0x-prefixed 20-byte address",
        )
        raise InvalidConfigError(f"Invalid CONTRACT address: {settings.chain.contract!r}")

    if container is None:
        container = Container()
        container.config.override(providers.Object(settings))
    listener = container.listener_service()
    coordinator = coordinator or ShutdownCoordinator()
    coordinator.add_callback(listener.halt)
    coordinator.install()

    try:
        await listener.start()
        await coordinator.wait()
    except asyncio.CancelledError:
        await _do_shutdown(listener, logger)
        raise
    finally:
        coordinator.uninstall()
    await _do_shutdown(listener, logger)


def main() -> None:
    """Run until interrupted; exit 0 after a clean shutdown, 1 on missing configuration."""
    try:
        asyncio.run(run())
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
