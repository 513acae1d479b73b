"""On-demand trigger for the webhook dispatcher."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from thirdplace.core.database import get_db
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository
from thirdplace.services.webhook_dispatcher import DeliveryQueueError, WebhookDispatcher

router = APIRouter()


@router.post(
    "/run",
    summary="Run one dispatch cycle",
    responses={
        200: {"description": "Cycle summary: processed, failed and total"},
        500: {"description": "Pending deliveries could not be read"},
    },
)
def run_dispatch_cycle(db: Session = Depends(get_db)) -> Any:
    """Deliver up to one batch of pending webhooks and return the summary."""
    dispatcher = WebhookDispatcher(WebhookDeliveryRepository(db))
    try:
        summary = dispatcher.run_dispatch_cycle()
    except DeliveryQueueError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    return summary.as_response()
