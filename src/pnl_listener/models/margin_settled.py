"""MarginSettledEvent: one decoded MarginSettled log occurrence.

Built by clients.chain.abi from an eth_subscription notification and consumed
once by the event pipeline. Nothing keeps it after processing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from pnl_listener.utils.dedupe import event_identity


@dataclass(frozen=True, slots=True)
class MarginSettledEvent:
    """MarginSettled(address indexed trader, uint256 openMargin, uint256 closeMargin, uint256 profit, bool traderWon)."""

    trader: str
    """Trader address (checksum form as decoded; identity is case-insensitive)."""
    open_margin: int
    close_margin: int
    profit: int
    """Logged only."""
    trader_won: bool
    """Logged only."""
    transaction_hash: str
    log_index: int
    block_number: int

    @property
    def identity(self) -> str:
        """Dedup key: "<tx hash>:<log index>"."""
        return event_identity(self.transaction_hash, self.log_index)

    def to_dict(self) -> dict[str, Any]:
        """Snake_case dict; integers kept exact."""
        return asdict(self)
