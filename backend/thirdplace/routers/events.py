"""Application event intake: fans events out to subscribed webhook configurations."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from thirdplace.core.database import get_db
from thirdplace.schemas.webhook import WebhookEventAccepted, WebhookEventCreate
from thirdplace.services.webhook_service import WebhookService

router = APIRouter()


@router.post(
    "/",
    response_model=WebhookEventAccepted,
    status_code=202,
    summary="Publish an application event",
    responses={
        400: {"description": "Unknown event type"},
        422: {"description": "Validation error"},
    },
)
async def publish_event(
    data: WebhookEventCreate,
    db: Session = Depends(get_db),
) -> WebhookEventAccepted:
    """Enqueue one pending delivery per subscribed, active configuration."""
    service = WebhookService(db)
    try:
        deliveries = service.dispatch_event(data.event_type, data.payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return WebhookEventAccepted(event_type=data.event_type, deliveries=len(deliveries))
