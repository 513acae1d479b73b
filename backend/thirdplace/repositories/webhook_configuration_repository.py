"""WebhookConfiguration repository for data access."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from thirdplace.models.webhook_configuration import WebhookConfiguration
from thirdplace.schemas.webhook import WebhookConfigurationCreate, WebhookConfigurationUpdate


class WebhookConfigurationRepository:
    """Repository for WebhookConfiguration model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100) -> list[WebhookConfiguration]:
        """Get all webhook configurations, newest first."""
        return (
            self.db.query(WebhookConfiguration)
            .order_by(WebhookConfiguration.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        """Count all webhook configurations."""
        return self.db.query(func.count(WebhookConfiguration.id)).scalar() or 0

    def get_by_id(self, config_id: UUID) -> WebhookConfiguration | None:
        """Get a webhook configuration by ID."""
        return (
            self.db.query(WebhookConfiguration)
            .filter(WebhookConfiguration.id == config_id)
            .first()
        )

    def get_active(self) -> list[WebhookConfiguration]:
        """Get all active webhook configurations."""
        return (
            self.db.query(WebhookConfiguration)
            .filter(WebhookConfiguration.is_active.is_(True))
            .order_by(WebhookConfiguration.created_at.asc())
            .all()
        )

    def get_active_for_event(self, event_type: str) -> list[WebhookConfiguration]:
        """Get active configurations subscribed to ``event_type``.

        ``events`` is a JSON column, so membership is checked in Python to
        stay portable between SQLite and PostgreSQL.
        """
        return [config for config in self.get_active() if config.subscribes_to(event_type)]

    def create(self, data: WebhookConfigurationCreate) -> WebhookConfiguration:
        """Create a new webhook configuration."""
        config = WebhookConfiguration(
            name=data.name,
            url=data.url,
            events=data.events,
            secret_key=data.secret_key or None,
            is_active=data.is_active,
            created_by=data.created_by,
        )
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config

    def update(
        self, config_id: UUID, data: WebhookConfigurationUpdate,
    ) -> WebhookConfiguration | None:
        """Update a webhook configuration by ID."""
        config = self.get_by_id(config_id)
        if not config:
            return None

        update_data = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key == "secret_key"
        }
        if "secret_key" in update_data:
            # An empty string clears the secret
            update_data["secret_key"] = update_data["secret_key"] or None
        for key, value in update_data.items():
            setattr(config, key, value)

        self.db.commit()
        self.db.refresh(config)
        return config

    def delete(self, config_id: UUID) -> bool:
        """Delete a webhook configuration and its delivery history."""
        config = self.get_by_id(config_id)
        if not config:
            return False

        self.db.delete(config)
        self.db.commit()
        return True
