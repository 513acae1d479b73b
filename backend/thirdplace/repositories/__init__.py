from thirdplace.repositories.delivery_store import DeliveryStore, PendingDelivery
from thirdplace.repositories.webhook_configuration_repository import (
    WebhookConfigurationRepository,
)
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository

__all__ = [
    "DeliveryStore",
    "PendingDelivery",
    "WebhookConfigurationRepository",
    "WebhookDeliveryRepository",
]
