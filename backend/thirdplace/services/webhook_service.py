"""Webhook enqueue service: turns application events into pending deliveries."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from thirdplace.models.webhook_delivery import WebhookDelivery
from thirdplace.models.webhook_event import WEBHOOK_EVENT_TYPES, WebhookEventType
from thirdplace.repositories.webhook_configuration_repository import (
    WebhookConfigurationRepository,
)
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository

logger = logging.getLogger(__name__)


class WebhookService:
    """Service for enqueuing webhook deliveries."""

    def __init__(self, db: Session):
        self.db = db
        self.config_repo = WebhookConfigurationRepository(db)
        self.delivery_repo = WebhookDeliveryRepository(db)

    def dispatch_event(
        self,
        event_type: WebhookEventType | str,
        payload: Any,
    ) -> list[WebhookDelivery]:
        """Create a pending delivery for every configuration subscribed to an event.

        Args:
            event_type: Event type (e.g., "user.joined_community").
            payload: JSON-serializable event payload, forwarded verbatim
                (``None`` is stored and sent as JSON ``null``).

        Returns:
            List of created WebhookDelivery records. They are written in one
            transaction, so a failure leaves none behind.

        Raises:
            ValueError: If ``event_type`` is not a known event type.
        """
        event_value = event_type.value if isinstance(event_type, WebhookEventType) else event_type
        if event_value not in WEBHOOK_EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_value}")

        config_ids = [config.id for config in self.config_repo.get_active_for_event(event_value)]
        deliveries = self.delivery_repo.create_many(
            config_ids,  # type: ignore[arg-type]
            event_type=event_value,
            payload=payload,
        )

        logger.info("Enqueued %d deliveries for %s", len(deliveries), event_value)
        return deliveries

    def send_test_event(self, config_id: UUID) -> WebhookDelivery:
        """Enqueue a ``webhook.test`` delivery for a single configuration.

        The test event bypasses the subscription check so an operator can
        verify any active endpoint.

        Raises:
            ValueError: If the configuration does not exist or is inactive.
        """
        config = self.config_repo.get_by_id(config_id)
        if not config:
            raise ValueError(f"Webhook configuration {config_id} not found")
        if not config.is_active:
            raise ValueError("Cannot test an inactive webhook configuration")

        delivery = self.delivery_repo.create(
            webhook_config_id=config.id,  # type: ignore[arg-type]
            event_type=WebhookEventType.WEBHOOK_TEST.value,
            payload={
                "test": True,
                "timestamp": datetime.now(UTC).isoformat(),
                "webhook_config_id": str(config.id),
            },
        )
        logger.info("Enqueued test delivery %s for configuration %s", delivery.id, config.id)
        return delivery
