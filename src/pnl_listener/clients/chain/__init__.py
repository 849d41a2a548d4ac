"""Chain-side helpers: MarginSettled ABI decoding and subscription filter."""

from pnl_listener.clients.chain.abi import (
    MARGIN_SETTLED_SIGNATURE,
    MARGIN_SETTLED_TOPIC,
    build_logs_filter,
    decode_margin_settled,
)

__all__ = [
    "MARGIN_SETTLED_SIGNATURE",
    "MARGIN_SETTLED_TOPIC",
    "build_logs_filter",
    "decode_margin_settled",
]
