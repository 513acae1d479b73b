"""Storage contract the webhook dispatcher runs against.

The dispatcher only ever sees ``PendingDelivery`` snapshots and talks to the
queue through ``DeliveryStore``, so the retry bookkeeping can be exercised
against any backend (SQLAlchemy in production, an in-memory store in tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

RESPONSE_BODY_LIMIT = 1000
ERROR_MESSAGE_LIMIT = 500


def truncate(value: str | None, limit: int) -> str | None:
    """Cap text coming back from an external endpoint at ``limit`` characters."""
    if value is None:
        return None
    return value[:limit]


@dataclass(frozen=True)
class PendingDelivery:
    """Snapshot of an eligible delivery joined with its configuration."""

    id: UUID
    webhook_config_id: UUID
    event_type: str
    payload: Any
    attempts: int
    url: str
    secret_key: str | None = None
    created_at: datetime | None = None


class DeliveryStore(ABC):
    """Queue operations used by the dispatcher."""

    @abstractmethod
    def select_pending_batch(self, limit: int, max_attempts: int) -> list[PendingDelivery]:
        """Return up to ``limit`` pending deliveries, oldest first.

        Only rows with ``attempts < max_attempts`` whose configuration is
        active are returned.
        """
        pass  # pragma: no cover

    @abstractmethod
    def try_claim(self, delivery_id: UUID, attempts: int) -> bool:
        """Take a short lease on a delivery before sending it.

        Returns False when the row has moved on (another run already
        attempted it) or is leased by a concurrent run.
        """
        pass  # pragma: no cover

    @abstractmethod
    def mark_delivered(
        self,
        delivery_id: UUID,
        attempts: int,
        response_status: int,
        response_body: str | None,
    ) -> None:
        """Record a 2xx response. ``attempts`` is the new attempt count."""
        pass  # pragma: no cover

    @abstractmethod
    def mark_failed_or_retry(
        self,
        delivery_id: UUID,
        attempts: int,
        error_message: str,
        max_attempts: int,
        response_status: int | None = None,
    ) -> str:
        """Record a failed attempt and return the resulting status.

        The row becomes ``failed`` once ``attempts >= max_attempts`` and
        stays ``pending`` otherwise.
        """
        pass  # pragma: no cover
