"""WebhookDelivery model: one (configuration, event) delivery record."""

from enum import Enum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from thirdplace.core.database import Base
from thirdplace.models.shared import UUIDType, generate_uuid, utc_now


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class WebhookDelivery(Base):
    """Delivery record mutated by the dispatcher on every attempt."""

    __tablename__ = "webhook_deliveries"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'delivered', 'failed')",
            name="ck_webhook_deliveries_status",
        ),
        Index("ix_webhook_deliveries_webhook_config_id", "webhook_config_id"),
        Index("ix_webhook_deliveries_status_created_at", "status", "created_at"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    webhook_config_id = Column(
        UUIDType,
        ForeignKey("webhook_configurations.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default=DeliveryStatus.PENDING.value)
    attempts = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)
    response_status = Column(Integer, nullable=True)
    response_body = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)

    # Microsecond resolution; SQLite's CURRENT_TIMESTAMP only has whole seconds
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())

    configuration = relationship("WebhookConfiguration", back_populates="deliveries")
