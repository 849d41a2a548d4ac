"""Abstract interface for the record of already processed event identities."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ISeenEventRepository(ABC):
    """Bounded, volatile set of event identities (see utils.dedupe.event_identity).

    Methods are synchronous: the pipeline checks and records an identity with
    no suspension point in between, so two deliveries of one log cannot both pass.
    """

    @abstractmethod
    def contains(self, identity: str) -> bool:
        """Return True if identity has been recorded (and not evicted since)."""
        ...

    @abstractmethod
    def add(self, identity: str) -> None:
        """Record identity. Re-adding a known identity is a no-op."""
        ...

    @abstractmethod
    def maybe_collect(self, max_size: int) -> int:
        """Enforce the size ceiling. Returns how many identities were dropped."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...
