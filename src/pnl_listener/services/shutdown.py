"""ShutdownCoordinator: turns SIGINT/SIGTERM into a shutdown event on the running loop."""

from __future__ import annotations

import asyncio
import signal
from typing import Any, Callable, Optional

import structlog


class ShutdownCoordinator:
    """Owns the shutdown event awaited by main.run()."""

    def __init__(
        self,
        signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._signals = signals
        self._event = asyncio.Event()
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._installed: list[signal.Signals] = []
        self._callbacks: list[Callable[[], None]] = []

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def install(self) -> None:
        """Register signal handlers on the running loop (no-op where unsupported)."""
        loop = asyncio.get_running_loop()
        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
                self._installed.append(sig)
            except (NotImplementedError, RuntimeError):
                pass  # Windows has no add_signal_handler

    def uninstall(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._installed:
            loop.remove_signal_handler(sig)
        self._installed.clear()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback synchronously when shutdown is first requested."""
        self._callbacks.append(callback)

    def request_shutdown(self, reason: str = "requested") -> None:
        if self._event.is_set():
            return
        self._logger.info("shutdown_requested", reason=reason)
        self._event.set()
        for callback in self._callbacks:
            try:
                callback()
            except Exception as e:
                self._logger.exception(
                    "shutdown_callback_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )

    async def wait(self) -> None:
        await self._event.wait()
