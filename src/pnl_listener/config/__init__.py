"""Configuration subpackage."""

from pnl_listener.config.config import (
    AppSettings,
    ChainSettings,
    DedupSettings,
    LoggingSettings,
    PipelineSettings,
    Settings,
    SupabaseSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "ChainSettings",
    "DedupSettings",
    "LoggingSettings",
    "PipelineSettings",
    "Settings",
    "SupabaseSettings",
    "get_settings",
]
