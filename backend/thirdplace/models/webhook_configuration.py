"""WebhookConfiguration model for administrator-registered endpoints."""

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from thirdplace.core.database import Base
from thirdplace.models.shared import UUIDType, generate_uuid


class WebhookConfiguration(Base):
    """A destination endpoint subscribed to a set of event types."""

    __tablename__ = "webhook_configurations"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    events = Column(JSON, nullable=False, default=list)
    secret_key = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    deliveries = relationship(
        "WebhookDelivery",
        back_populates="configuration",
        cascade="all, delete-orphan",
    )

    def subscribes_to(self, event_type: str) -> bool:
        """Return True if this configuration should receive ``event_type``."""
        return bool(self.is_active) and event_type in (self.events or [])
