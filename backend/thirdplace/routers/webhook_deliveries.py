"""Webhook delivery history API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from thirdplace.core.database import get_db
from thirdplace.models.webhook_delivery import DeliveryStatus, WebhookDelivery
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository
from thirdplace.schemas.webhook import WebhookDeliveryResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[WebhookDeliveryResponse],
    summary="List webhook deliveries",
)
async def list_webhook_deliveries(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    webhook_config_id: UUID | None = None,
    status: DeliveryStatus | None = None,
    order_by: str | None = None,
    db: Session = Depends(get_db),
) -> list[WebhookDelivery]:
    """List recent deliveries, optionally for one configuration or status."""
    repo = WebhookDeliveryRepository(db)
    status_value = status.value if status else None
    response.headers["X-Total-Count"] = str(
        repo.count(webhook_config_id=webhook_config_id, status=status_value)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        webhook_config_id=webhook_config_id,
        status=status_value,
        order_by=order_by,
    )


@router.get(
    "/{delivery_id}",
    response_model=WebhookDeliveryResponse,
    summary="Get webhook delivery",
    responses={404: {"description": "Webhook delivery not found"}},
)
async def get_webhook_delivery(
    delivery_id: UUID,
    db: Session = Depends(get_db),
) -> WebhookDelivery:
    """Get delivery details, including the last response or error."""
    repo = WebhookDeliveryRepository(db)
    delivery = repo.get_by_id(delivery_id)
    if not delivery:
        raise HTTPException(status_code=404, detail="Webhook delivery not found")
    return delivery
