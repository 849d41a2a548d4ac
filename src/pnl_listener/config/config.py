# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. CHAIN__WSS_URL, SUPABASE__KEY.
The flat names used by older deployments (WSS_URL, CONTRACT, SUPABASE_URL,
SUPABASE_KEY, DECIMALS) are read as well.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "pnl-listener"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/pnl_listener.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ChainSettings(BaseSettings):
    """Upstream WebSocket node and the contract emitting MarginSettled."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    wss_url: str = Field(
        default="wss://testnet.dplabs-internal.com",
        description="WebSocket JSON-RPC endpoint of the chain node.",
    )
    contract: str = Field(
        default="",
        description="Address of the contract emitting MarginSettled. Required.",
    )
    reconnect_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=300.0,
        description="Fixed delay before re-establishing a dropped connection.",
    )
    subscribe_timeout_seconds: float = Field(
        default=10.0,
        ge=0.1,
        le=120.0,
        description="How long to wait for the eth_subscribe response.",
    )
    heartbeat_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=600.0,
        description="WebSocket ping interval used to detect dead connections.",
    )


class SupabaseSettings(BaseSettings):
    """Aggregation service (Supabase PostgREST RPC). Env: SUPABASE_URL, SUPABASE_KEY."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_", env_file=".env", extra="ignore")

    url: str = Field(default="", description="Supabase project URL. Required.")
    key: str = Field(
        default="",
        description="Supabase key; use the service_role key server-side. Required.",
    )
    rpc_function: str = Field(
        default="add_pnl",
        description="Name of the RPC function that adds a delta to a trader's total.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )


class PipelineSettings(BaseSettings):
    """Event pipeline: fixed-point scale and channel size."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    decimals: int = Field(
        default=6,
        ge=0,
        le=36,
        description="Scale of openMargin/closeMargin; deltas are formatted with this many digits.",
    )
    queue_size: int = Field(
        default=10_000,
        ge=0,
        description="Capacity of the event channel (0 means unbounded).",
    )


class DedupSettings(BaseSettings):
    """Bounded in-memory record of processed event identities."""

    model_config = SettingsConfigDict(env_prefix="DEDUP_", env_file=".env", extra="ignore")

    max_size: int = Field(
        default=50_000,
        ge=1,
        description="Ceiling on the number of remembered event identities.",
    )
    strategy: Literal["fifo", "clear"] = Field(
        default="fifo",
        description="fifo evicts the oldest identities; clear empties the whole set.",
    )


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, CHAIN__CONTRACT.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    dedup: DedupSettings = Field(default_factory=DedupSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.
        from_env(chain={"contract": "0x..."}).
        """
        return cls(**overrides)

    def missing_required(self) -> list[str]:
        """Return the env names of required values that are empty."""
        missing: list[str] = []
        if not self.chain.contract.strip():
            missing.append("CONTRACT")
        if not self.supabase.url.strip():
            missing.append("SUPABASE_URL")
        if not self.supabase.key.strip():
            missing.append("SUPABASE_KEY")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from pnl_listener.config import get_settings

        settings = get_settings()
        delay = settings.chain.reconnect_delay_seconds
    """
    return Settings()
