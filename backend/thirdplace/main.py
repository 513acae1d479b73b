from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from thirdplace.core.config import settings
from thirdplace.core.logging import configure_logging
from thirdplace.routers import (
    events,
    webhook_configurations,
    webhook_deliveries,
    webhook_dispatcher,
)

OPENAPI_TAGS = [
    {"name": "Webhooks", "description": "Manage webhook configurations and test endpoints."},
    {"name": "Deliveries", "description": "Inspect webhook delivery history."},
    {"name": "Dispatcher", "description": "Trigger a webhook dispatch cycle on demand."},
    {"name": "Events", "description": "Publish application events to subscribed webhooks."},
]

configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Webhook delivery backend for the community platform. "
        "Register endpoints, publish events and track at-least-once, "
        "retry-bounded deliveries."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(
    webhook_configurations.router,
    prefix="/v1/webhook_configurations",
    tags=["Webhooks"],
)
app.include_router(
    webhook_deliveries.router,
    prefix="/v1/webhook_deliveries",
    tags=["Deliveries"],
)
app.include_router(
    webhook_dispatcher.router,
    prefix="/v1/webhook_dispatcher",
    tags=["Dispatcher"],
)
app.include_router(events.router, prefix="/v1/events", tags=["Events"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
