"""Webhook configuration API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from thirdplace.core.database import get_db
from thirdplace.models.webhook_delivery import WebhookDelivery
from thirdplace.repositories.webhook_configuration_repository import (
    WebhookConfigurationRepository,
)
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository
from thirdplace.schemas.webhook import (
    ConfigurationDeliveryStats,
    WebhookConfigurationCreate,
    WebhookConfigurationResponse,
    WebhookConfigurationUpdate,
    WebhookDeliveryResponse,
)
from thirdplace.services.webhook_service import WebhookService

router = APIRouter()


@router.post(
    "/",
    response_model=WebhookConfigurationResponse,
    status_code=201,
    summary="Create webhook configuration",
    responses={422: {"description": "Validation error"}},
)
async def create_webhook_configuration(
    data: WebhookConfigurationCreate,
    db: Session = Depends(get_db),
) -> WebhookConfigurationResponse:
    """Register a new webhook destination."""
    repo = WebhookConfigurationRepository(db)
    return WebhookConfigurationResponse.from_model(repo.create(data))


@router.get(
    "/",
    response_model=list[WebhookConfigurationResponse],
    summary="List webhook configurations",
)
async def list_webhook_configurations(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[WebhookConfigurationResponse]:
    """List webhook configurations, newest first."""
    repo = WebhookConfigurationRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return [
        WebhookConfigurationResponse.from_model(config)
        for config in repo.get_all(skip=skip, limit=limit)
    ]


@router.get(
    "/delivery_stats",
    response_model=list[ConfigurationDeliveryStats],
    summary="Get delivery stats per configuration",
)
async def get_delivery_stats(
    db: Session = Depends(get_db),
) -> list[ConfigurationDeliveryStats]:
    """Get delivery outcome counts grouped by webhook configuration."""
    repo = WebhookDeliveryRepository(db)
    return [
        ConfigurationDeliveryStats(
            webhook_config_id=s["webhook_config_id"],
            total=s["total"],
            delivered=s["delivered"],
            failed=s["failed"],
            pending=s["pending"],
            success_rate=round(s["delivered"] / s["total"] * 100, 1) if s["total"] > 0 else 0.0,
        )
        for s in repo.delivery_stats_by_configuration()
    ]


@router.get(
    "/{config_id}",
    response_model=WebhookConfigurationResponse,
    summary="Get webhook configuration",
    responses={404: {"description": "Webhook configuration not found"}},
)
async def get_webhook_configuration(
    config_id: UUID,
    db: Session = Depends(get_db),
) -> WebhookConfigurationResponse:
    """Get a webhook configuration by ID."""
    repo = WebhookConfigurationRepository(db)
    config = repo.get_by_id(config_id)
    if not config:
        raise HTTPException(status_code=404, detail="Webhook configuration not found")
    return WebhookConfigurationResponse.from_model(config)


@router.put(
    "/{config_id}",
    response_model=WebhookConfigurationResponse,
    summary="Update webhook configuration",
    responses={
        404: {"description": "Webhook configuration not found"},
        422: {"description": "Validation error"},
    },
)
async def update_webhook_configuration(
    config_id: UUID,
    data: WebhookConfigurationUpdate,
    db: Session = Depends(get_db),
) -> WebhookConfigurationResponse:
    """Update a webhook configuration."""
    repo = WebhookConfigurationRepository(db)
    config = repo.update(config_id, data)
    if not config:
        raise HTTPException(status_code=404, detail="Webhook configuration not found")
    return WebhookConfigurationResponse.from_model(config)


@router.delete(
    "/{config_id}",
    status_code=204,
    summary="Delete webhook configuration",
    responses={404: {"description": "Webhook configuration not found"}},
)
async def delete_webhook_configuration(
    config_id: UUID,
    db: Session = Depends(get_db),
) -> None:
    """Delete a webhook configuration together with its delivery history."""
    repo = WebhookConfigurationRepository(db)
    if not repo.delete(config_id):
        raise HTTPException(status_code=404, detail="Webhook configuration not found")


@router.post(
    "/{config_id}/test",
    response_model=WebhookDeliveryResponse,
    status_code=201,
    summary="Send test webhook",
    responses={
        400: {"description": "Webhook configuration is inactive"},
        404: {"description": "Webhook configuration not found"},
    },
)
async def send_test_webhook(
    config_id: UUID,
    db: Session = Depends(get_db),
) -> WebhookDelivery:
    """Enqueue a ``webhook.test`` delivery for this configuration."""
    repo = WebhookConfigurationRepository(db)
    if not repo.get_by_id(config_id):
        raise HTTPException(status_code=404, detail="Webhook configuration not found")

    service = WebhookService(db)
    try:
        return service.send_test_event(config_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
