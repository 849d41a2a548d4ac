"""Envelope for items travelling through the event channel."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class QueueMessage[T]:
    """Payload plus receipt metadata (id for log correlation, receive time)."""

    id: uuid.UUID
    payload: T
    received_at: datetime
    metadata: dict[str, Any] | None = None

    @classmethod
    def create(cls, payload: T, metadata: dict[str, Any] | None = None) -> QueueMessage[T]:
        """Wrap payload with a fresh id and the current UTC time."""
        return cls(
            id=uuid.uuid4(),
            payload=payload,
            received_at=datetime.now(UTC),
            metadata=metadata,
        )
