"""WebhookDelivery repository: the SQL-backed delivery queue."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from thirdplace.core.config import settings
from thirdplace.core.sorting import apply_order_by
from thirdplace.models.shared import utc_now
from thirdplace.models.webhook_configuration import WebhookConfiguration
from thirdplace.models.webhook_delivery import DeliveryStatus, WebhookDelivery
from thirdplace.repositories.delivery_store import (
    ERROR_MESSAGE_LIMIT,
    RESPONSE_BODY_LIMIT,
    DeliveryStore,
    PendingDelivery,
    truncate,
)

logger = logging.getLogger(__name__)


class WebhookDeliveryRepository(DeliveryStore):
    """Repository for WebhookDelivery model."""

    def __init__(self, db: Session, claim_lease_seconds: int | None = None):
        self.db = db
        self.claim_lease_seconds = (
            claim_lease_seconds
            if claim_lease_seconds is not None
            else settings.WEBHOOK_CLAIM_LEASE_SECONDS
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @staticmethod
    def _new_delivery(webhook_config_id: UUID, event_type: str, payload: Any) -> WebhookDelivery:
        return WebhookDelivery(
            webhook_config_id=webhook_config_id,
            event_type=event_type,
            # Stored as JSON null rather than SQL NULL
            payload=JSON.NULL if payload is None else payload,
            status=DeliveryStatus.PENDING.value,
            attempts=0,
        )

    def create(
        self,
        webhook_config_id: UUID,
        event_type: str,
        payload: Any,
    ) -> WebhookDelivery:
        """Create a new pending delivery."""
        delivery = self._new_delivery(webhook_config_id, event_type, payload)
        self.db.add(delivery)
        self._commit()
        self.db.refresh(delivery)
        return delivery

    def create_many(
        self,
        webhook_config_ids: list[UUID],
        event_type: str,
        payload: Any,
    ) -> list[WebhookDelivery]:
        """Create one pending delivery per configuration in a single transaction.

        Either every row is written or, on error, none are.
        """
        deliveries = [
            self._new_delivery(config_id, event_type, payload) for config_id in webhook_config_ids
        ]
        if not deliveries:
            return []
        self.db.add_all(deliveries)
        self._commit()
        for delivery in deliveries:
            self.db.refresh(delivery)
        return deliveries

    def get_by_id(self, delivery_id: UUID) -> WebhookDelivery | None:
        """Get a delivery by ID."""
        return self.db.query(WebhookDelivery).filter(WebhookDelivery.id == delivery_id).first()

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        webhook_config_id: UUID | None = None,
        status: str | None = None,
        order_by: str | None = None,
    ) -> list[WebhookDelivery]:
        """Get deliveries with optional filters, newest first by default."""
        query = self.db.query(WebhookDelivery)
        if webhook_config_id:
            query = query.filter(WebhookDelivery.webhook_config_id == webhook_config_id)
        if status:
            query = query.filter(WebhookDelivery.status == status)
        query = apply_order_by(query, WebhookDelivery, order_by)
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        webhook_config_id: UUID | None = None,
        status: str | None = None,
    ) -> int:
        """Count deliveries matching the same filters as ``get_all``."""
        query = self.db.query(func.count(WebhookDelivery.id))
        if webhook_config_id:
            query = query.filter(WebhookDelivery.webhook_config_id == webhook_config_id)
        if status:
            query = query.filter(WebhookDelivery.status == status)
        return query.scalar() or 0

    def delivery_stats_by_configuration(self) -> list[dict[str, Any]]:
        """Get delivery stats (total, delivered, failed, pending) grouped by configuration."""
        rows = (
            self.db.query(
                WebhookDelivery.webhook_config_id,
                func.count(WebhookDelivery.id).label("total"),
                func.sum(
                    case((WebhookDelivery.status == DeliveryStatus.DELIVERED.value, 1), else_=0)
                ).label("delivered"),
                func.sum(
                    case((WebhookDelivery.status == DeliveryStatus.FAILED.value, 1), else_=0)
                ).label("failed"),
                func.sum(
                    case((WebhookDelivery.status == DeliveryStatus.PENDING.value, 1), else_=0)
                ).label("pending"),
            )
            .group_by(WebhookDelivery.webhook_config_id)
            .all()
        )
        return [
            {
                "webhook_config_id": row.webhook_config_id,
                "total": row.total,
                "delivered": int(row.delivered or 0),
                "failed": int(row.failed or 0),
                "pending": int(row.pending or 0),
            }
            for row in rows
        ]

    # Dispatcher queue operations

    def select_pending_batch(self, limit: int, max_attempts: int) -> list[PendingDelivery]:
        rows = (
            self.db.query(WebhookDelivery, WebhookConfiguration)
            .join(
                WebhookConfiguration,
                WebhookConfiguration.id == WebhookDelivery.webhook_config_id,
            )
            .filter(
                WebhookDelivery.status == DeliveryStatus.PENDING.value,
                WebhookDelivery.attempts < max_attempts,
                WebhookConfiguration.is_active.is_(True),
            )
            .order_by(WebhookDelivery.created_at.asc(), WebhookDelivery.id.asc())
            .limit(limit)
            .all()
        )
        return [
            PendingDelivery(
                id=delivery.id,
                webhook_config_id=delivery.webhook_config_id,
                event_type=delivery.event_type,
                payload=delivery.payload,
                attempts=int(delivery.attempts),
                url=config.url,
                secret_key=config.secret_key,
                created_at=delivery.created_at,
            )
            for delivery, config in rows
        ]

    def try_claim(self, delivery_id: UUID, attempts: int) -> bool:
        now = utc_now()
        lease_expired_before = now - timedelta(seconds=self.claim_lease_seconds)
        updated = (
            self.db.query(WebhookDelivery)
            .filter(
                WebhookDelivery.id == delivery_id,
                WebhookDelivery.status == DeliveryStatus.PENDING.value,
                WebhookDelivery.attempts == attempts,
                or_(
                    WebhookDelivery.claimed_at.is_(None),
                    WebhookDelivery.claimed_at < lease_expired_before,
                ),
            )
            .update({WebhookDelivery.claimed_at: now}, synchronize_session=False)
        )
        self._commit()
        return bool(updated)

    def mark_delivered(
        self,
        delivery_id: UUID,
        attempts: int,
        response_status: int,
        response_body: str | None,
    ) -> None:
        delivery = self.get_by_id(delivery_id)
        if not delivery:
            logger.warning("Delivery %s disappeared before it could be marked delivered", delivery_id)
            return

        delivery.status = DeliveryStatus.DELIVERED.value  # type: ignore[assignment]
        delivery.attempts = attempts  # type: ignore[assignment]
        delivery.last_attempt_at = utc_now()  # type: ignore[assignment]
        delivery.response_status = response_status  # type: ignore[assignment]
        delivery.response_body = truncate(response_body, RESPONSE_BODY_LIMIT)  # type: ignore[assignment]
        delivery.claimed_at = None  # type: ignore[assignment]
        self._commit()

    def mark_failed_or_retry(
        self,
        delivery_id: UUID,
        attempts: int,
        error_message: str,
        max_attempts: int,
        response_status: int | None = None,
    ) -> str:
        status = (
            DeliveryStatus.FAILED.value if attempts >= max_attempts else DeliveryStatus.PENDING.value
        )
        delivery = self.get_by_id(delivery_id)
        if not delivery:
            logger.warning("Delivery %s disappeared before its failure could be recorded", delivery_id)
            return status

        delivery.status = status  # type: ignore[assignment]
        delivery.attempts = attempts  # type: ignore[assignment]
        delivery.last_attempt_at = utc_now()  # type: ignore[assignment]
        delivery.response_status = response_status  # type: ignore[assignment]
        delivery.error_message = truncate(error_message, ERROR_MESSAGE_LIMIT)  # type: ignore[assignment]
        delivery.claimed_at = None  # type: ignore[assignment]
        self._commit()
        return status
