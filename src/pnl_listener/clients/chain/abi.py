"""MarginSettled log decoding (eth_abi) for eth_subscription notifications."""

from __future__ import annotations

from typing import Any

from eth_abi import decode as abi_decode
from eth_utils import keccak, to_checksum_address

from pnl_listener.exceptions import EventDecodeError
from pnl_listener.models.margin_settled import MarginSettledEvent

MARGIN_SETTLED_SIGNATURE = "MarginSettled(address,uint256,uint256,uint256,bool)"
MARGIN_SETTLED_TOPIC = "0x" + keccak(text=MARGIN_SETTLED_SIGNATURE).hex()

# Non-indexed fields, in ABI order: openMargin, closeMargin, profit, traderWon
_DATA_TYPES = ["uint256", "uint256", "uint256", "bool"]


def _hex_to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise EventDecodeError(f"expected hex string, got {type(value).__name__}")
    s = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise EventDecodeError(f"invalid hex: {value!r}") from e


def _quantity(value: Any, field: str) -> int:
    """JSON-RPC quantities arrive as 0x-hex strings; ints are accepted as-is."""
    if isinstance(value, bool):
        raise EventDecodeError(f"{field} is not a quantity")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value:
        try:
            return int(value, 16) if value.startswith(("0x", "0X")) else int(value)
        except ValueError as e:
            raise EventDecodeError(f"{field} is not a quantity: {value!r}") from e
    raise EventDecodeError(f"{field} is missing")


def decode_margin_settled(log: dict[str, Any]) -> MarginSettledEvent:
    """Decode a raw log object (as delivered by eth_subscribe "logs") into MarginSettledEvent.

    Args:
        log: Log dict with topics, data, transactionHash, logIndex, blockNumber.

    Returns:
        The decoded event.

    Raises:
        EventDecodeError: If the log is not a well-formed MarginSettled log.
    """
    topics = log.get("topics") or []
    if len(topics) < 2:
        raise EventDecodeError(f"expected 2 topics, got {len(topics)}")
    topic0 = "0x" + _hex_to_bytes(topics[0]).hex()
    if topic0 != MARGIN_SETTLED_TOPIC:
        raise EventDecodeError(f"unexpected topic0 {topic0}")

    tx_hash = log.get("transactionHash")
    if not isinstance(tx_hash, str) or not tx_hash:
        raise EventDecodeError("transactionHash is missing")

    try:
        (trader,) = abi_decode(["address"], _hex_to_bytes(topics[1]))
        open_margin, close_margin, profit, trader_won = abi_decode(
            _DATA_TYPES, _hex_to_bytes(log.get("data", "0x"))
        )
    except EventDecodeError:
        raise
    except Exception as e:
        raise EventDecodeError(f"ABI decode failed: {e}") from e

    return MarginSettledEvent(
        trader=to_checksum_address(trader),
        open_margin=int(open_margin),
        close_margin=int(close_margin),
        profit=int(profit),
        trader_won=bool(trader_won),
        transaction_hash=tx_hash,
        log_index=_quantity(log.get("logIndex"), "logIndex"),
        block_number=_quantity(log.get("blockNumber"), "blockNumber"),
    )


def build_logs_filter(contract: str) -> dict[str, Any]:
    """eth_subscribe("logs", filter) params restricted to one contract and MarginSettled."""
    return {
        "address": to_checksum_address(contract.strip()),
        "topics": [MARGIN_SETTLED_TOPIC],
    }
