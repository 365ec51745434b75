from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from eventhub_api import __version__
from eventhub_api.core.settings import settings
from eventhub_api.db.session import engine
from .api.routes import api_router
from .core.logging import configure_logging
from .observability.tracing import configure_tracing


APP_VERSION = __version__
SERVICE_NAME = "eventhub-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.courtesy_notifications_enabled:
        logger.info(
            "Courtesy notifications enabled",
            queue=settings.courtesy_notification_task_queue,
        )
    else:
        logger.info(
            "Courtesy notifications disabled",
            reason="courtesy_notifications_enabled is false",
        )
    logger.info(
        "Courtesy grants configured",
        isolation_level=settings.courtesy_transaction_isolation,
        default_locale=settings.default_locale,
    )

    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    """Application factory for the EventHub FastAPI service."""
    configure_logging(
        service_name=SERVICE_NAME,
        environment=settings.environment,
        version=APP_VERSION,
    )

    app = FastAPI(
        title="EventHub API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    configure_tracing(
        app,
        service_name=SERVICE_NAME,
        service_version=APP_VERSION,
        environment=settings.environment,
    )

    app.include_router(api_router)

    @app.get("/healthz", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": APP_VERSION,
        }

    return app
