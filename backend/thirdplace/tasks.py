"""Helpers for pushing jobs onto the arq queue from the API process."""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from thirdplace.core.config import settings

redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)

# A second on-demand request is dropped while one is still queued
DISPATCH_JOB_ID = "dispatch-webhooks-on-demand"


async def get_redis_pool() -> ArqRedis:
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job | None:
    """Enqueue ``task_name`` on the worker and close the pool afterwards.

    Returns None when arq refuses the job because one with the same
    ``_job_id`` already exists.
    """
    pool = await get_redis_pool()
    try:
        return await pool.enqueue_job(task_name, *args, **kwargs)
    finally:
        await pool.close()


async def enqueue_dispatch_cycle() -> Job | None:
    """Ask the worker for a dispatch cycle outside the one-minute schedule."""
    return await enqueue_task("dispatch_webhooks_task", _job_id=DISPATCH_JOB_ID)
