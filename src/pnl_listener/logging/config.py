# -*- coding: utf-8 -*-
"""structlog setup: stdlib handlers underneath, optional Logfire export."""

from __future__ import annotations

import logging
import logfire
import structlog
from typing import Any
from structlog.types import EventDict, Processor
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from pnl_listener.config import AppSettings, LoggingSettings, Settings, get_settings

_LOGFIRE_LEVELS: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

# Libraries that log every ping/request at DEBUG; kept at WARNING or above.
_CHATTY_LOGGERS = ("aiohttp.client", "aiohttp.access", "aiohttp.websocket")


def _service_context(app: AppSettings) -> Processor:
    """Processor stamping the logger name and the app identity onto each event."""
    static: dict[str, Any] = {"app_name": app.app_name, "environment": app.environment}
    if app.service_name:
        static["service_name"] = app.service_name
    if app.service_version:
        static["service_version"] = app.service_version

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        stdlib_logger = getattr(logger, "_logger", None)
        event_dict["logger"] = (
            getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or ""
        )
        event_dict.update(static)
        return event_dict

    return processor


def _console_handler(cfg: LoggingSettings) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.getLevelName(cfg.console_level))
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(cfg: LoggingSettings) -> logging.Handler:
    path = Path(cfg.log_file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path,
        when=cfg.log_file_when,
        interval=cfg.log_file_interval,
        backupCount=cfg.log_file_backup_count,
        encoding="utf-8",
        utc=cfg.log_file_utc,
    )
    handler.setLevel(logging.getLevelName(cfg.file_level))
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _build_handlers(cfg: LoggingSettings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        handlers.append(_console_handler(cfg))
    if cfg.log_to_file:
        handlers.append(_file_handler(cfg))
    return handlers


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog events through stdlib handlers, and to Logfire when enabled.

    A rotating file always gets JSON lines, so when file output is on the
    console shares that renderer. Calling this again replaces the previous setup.
    """
    settings = settings or get_settings()
    cfg = settings.logging

    handlers = _build_handlers(cfg)
    if handlers:
        root_level = min(h.level for h in handlers)
        logging.basicConfig(level=root_level, handlers=handlers, force=True)
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(max(root_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_context(settings.app),
    ]

    if cfg.logfire_enabled:
        logfire.configure(
            token=cfg.logfire_token,
            service_name=settings.app.service_name or settings.app.app_name,
            service_version=settings.app.service_version,
            min_level=_LOGFIRE_LEVELS.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
            environment=settings.app.environment,
        )
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    if handlers:
        renderer: Any = (
            structlog.processors.JSONRenderer()
            if cfg.log_to_file or cfg.json_format
            else structlog.dev.ConsoleRenderer()
        )
        processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
