"""Celery application setup for courtesy notifications and other background jobs."""

from __future__ import annotations

from celery import Celery

from eventhub_api.core.settings import settings


def _resolve_backend_url() -> str:
    return settings.celery_result_backend or settings.redis_url


def _resolve_broker_url() -> str:
    return settings.celery_broker_url or settings.redis_url


celery_app = Celery(
    "eventhub_api",
    broker=_resolve_broker_url(),
    backend=_resolve_backend_url(),
)

celery_app.conf.update(
    task_default_queue=settings.celery_default_queue,
    task_routes={
        "courtesies.*": {"queue": settings.courtesy_notification_task_queue},
    },
    timezone="UTC",
    broker_connection_retry_on_startup=True,
)

celery_app.autodiscover_tasks(["eventhub_api.celery_tasks"])

__all__ = ["celery_app"]
