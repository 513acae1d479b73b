import asyncio
import logging
from typing import Any

from arq import cron

from thirdplace.core.config import settings
from thirdplace.core.database import SessionLocal
from thirdplace.core.logging import configure_logging
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository
from thirdplace.services.webhook_dispatcher import WebhookDispatcher
from thirdplace.tasks import redis_settings

logger = logging.getLogger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    configure_logging()
    logger.info("Webhook worker started (batch size %d)", settings.WEBHOOK_BATCH_SIZE)


def run_dispatch_cycle() -> dict[str, int]:
    """Run one dispatch cycle on a fresh session."""
    db = SessionLocal()
    try:
        dispatcher = WebhookDispatcher(WebhookDeliveryRepository(db))
        return dispatcher.run_dispatch_cycle().as_response()
    finally:
        db.close()


async def dispatch_webhooks_task(ctx: dict[str, Any]) -> dict[str, int]:
    """Background task: deliver one batch of pending webhooks.

    Runs every minute. Each run is bounded by the batch size, so a larger
    backlog drains over consecutive runs. The cycle does blocking HTTP and
    database I/O, so it runs in a thread.
    """
    summary = await asyncio.to_thread(run_dispatch_cycle)
    if summary.get("total"):
        logger.info(
            "Dispatched %d webhooks (%d failed)", summary["processed"], summary["failed"]
        )
    return summary


class WorkerSettings:
    functions = [
        dispatch_webhooks_task,
    ]
    cron_jobs = [
        cron(dispatch_webhooks_task, second=0, unique=True),  # every minute
    ]
    on_startup = startup
    redis_settings = redis_settings
