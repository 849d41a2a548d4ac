"""PnlForwarder: pushes one signed delta to the aggregation service."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from pnl_listener.exceptions import AggregatorServiceError, AggregatorTransportError
from pnl_listener.utils.validation import mask_address, normalize_address

if TYPE_CHECKING:
    from pnl_listener.clients.supabase import SupabaseRpcClient
    from pnl_listener.config import Settings


class PnlForwarder:
    """Adds a delta to a trader's running total via the `add_pnl` RPC.

    Never raises: every failure is logged and reported as None. There is no
    retry, so a failed push is a lost delta for that trader.
    """

    def __init__(
        self,
        rpc_client: SupabaseRpcClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._rpc = rpc_client
        self._function = settings.supabase.rpc_function
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def push(self, trader: str, delta: str) -> Any | None:
        """Send (trader, delta) and return the new total, or None on any failure.

        Args:
            trader: Trader address; sent lowercased as p_trader.
            delta: Signed fixed-point string; sent as p_delta_x6.
        """
        params = {"p_trader": normalize_address(trader), "p_delta_x6": delta}
        try:
            return await self._rpc.call_rpc(self._function, params)
        except AggregatorServiceError as e:
            self._logger.error(
                "aggregator_rpc_error",
                rpc_function=self._function,
                trader_masked=mask_address(trader),
                delta=delta,
                http_status_code=e.status_code,
                error_code=e.code,
                error_message=str(e),
            )
        except AggregatorTransportError as e:
            self._logger.error(
                "aggregator_rpc_transport_failed",
                rpc_function=self._function,
                trader_masked=mask_address(trader),
                delta=delta,
                error_type=type(e.cause).__name__ if e.cause else None,
                error_message=str(e),
            )
        except Exception as e:
            self._logger.exception(
                "aggregator_rpc_unexpected_error",
                rpc_function=self._function,
                trader_masked=mask_address(trader),
                delta=delta,
                error_type=type(e).__name__,
                error_message=str(e),
            )
        return None
