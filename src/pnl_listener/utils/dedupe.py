"""Deduplication key for on-chain log events."""

from __future__ import annotations


def event_identity(transaction_hash: str, log_index: int) -> str:
    """Return the stable identity of one log occurrence: "<tx hash>:<log index>".

    The hash is lowercased so the same log delivered with different hex casing
    maps to the same key.
    """
    tx = (transaction_hash or "").strip().lower()
    if not tx:
        raise ValueError("transaction_hash must be non-empty")
    if log_index < 0:
        raise ValueError("log_index must be non-negative")
    return f"{tx}:{log_index}"
