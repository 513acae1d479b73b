from thirdplace.models.webhook_configuration import WebhookConfiguration
from thirdplace.models.webhook_delivery import DeliveryStatus, WebhookDelivery
from thirdplace.models.webhook_event import WEBHOOK_EVENT_TYPES, WebhookEventType

__all__ = [
    "DeliveryStatus",
    "WEBHOOK_EVENT_TYPES",
    "WebhookConfiguration",
    "WebhookDelivery",
    "WebhookEventType",
]
