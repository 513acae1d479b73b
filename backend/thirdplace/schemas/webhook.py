"""WebhookConfiguration and WebhookDelivery schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thirdplace.models.webhook_event import WEBHOOK_EVENT_TYPES


def _validate_events(events: list[str]) -> list[str]:
    unknown = [event for event in events if event not in WEBHOOK_EVENT_TYPES]
    if unknown:
        raise ValueError(f"Unknown event types: {', '.join(sorted(set(unknown)))}")
    # Keep first-seen order, drop duplicates
    return list(dict.fromkeys(events))


class WebhookConfigurationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=2048)
    events: list[str] = Field(min_length=1)
    secret_key: str | None = None
    is_active: bool = True
    created_by: str | None = Field(default=None, max_length=255)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v

    @field_validator("events")
    @classmethod
    def validate_events(cls, v: list[str]) -> list[str]:
        return _validate_events(v)


class WebhookConfigurationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    url: str | None = Field(default=None, min_length=1, max_length=2048)
    events: list[str] | None = Field(default=None, min_length=1)
    secret_key: str | None = None
    is_active: bool | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v

    @field_validator("events")
    @classmethod
    def validate_events(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return _validate_events(v)


class WebhookConfigurationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    url: str
    events: list[str]
    has_secret: bool = False
    is_active: bool
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, config: Any) -> "WebhookConfigurationResponse":
        response = cls.model_validate(config)
        response.has_secret = bool(config.secret_key)
        return response


class WebhookDeliveryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    webhook_config_id: UUID
    event_type: str
    payload: Any
    status: str
    attempts: int
    last_attempt_at: datetime | None = None
    response_status: int | None = None
    response_body: str | None = None
    error_message: str | None = None
    created_at: datetime


class ConfigurationDeliveryStats(BaseModel):
    webhook_config_id: UUID
    total: int
    delivered: int
    failed: int
    pending: int
    success_rate: float


class WebhookEventCreate(BaseModel):
    event_type: str = Field(max_length=100)
    payload: Any = Field(default_factory=dict)

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        if v not in WEBHOOK_EVENT_TYPES:
            raise ValueError(f"Unknown event type: {v}")
        return v


class WebhookEventAccepted(BaseModel):
    event_type: str
    deliveries: int


class DispatchSummary(BaseModel):
    """Outcome of one dispatch cycle."""

    processed: int = 0
    failed: int = 0
    total: int = 0

    def as_response(self) -> dict[str, int]:
        """Render the summary as returned over HTTP.

        An empty queue is reported as ``{"processed": 0}``.
        """
        if self.total == 0:
            return {"processed": 0}
        return self.model_dump()
