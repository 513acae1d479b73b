from thirdplace.schemas.webhook import (
    ConfigurationDeliveryStats,
    DispatchSummary,
    WebhookConfigurationCreate,
    WebhookConfigurationResponse,
    WebhookConfigurationUpdate,
    WebhookDeliveryResponse,
    WebhookEventAccepted,
    WebhookEventCreate,
)

__all__ = [
    "ConfigurationDeliveryStats",
    "DispatchSummary",
    "WebhookConfigurationCreate",
    "WebhookConfigurationResponse",
    "WebhookConfigurationUpdate",
    "WebhookDeliveryResponse",
    "WebhookEventAccepted",
    "WebhookEventCreate",
]
