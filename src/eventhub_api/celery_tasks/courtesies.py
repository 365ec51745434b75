from __future__ import annotations

from loguru import logger

from eventhub_api.celery_app import celery_app
from eventhub_api.core.settings import settings
from eventhub_api.services.notifications.dispatcher import COURTESY_GRANTED_TASK
from eventhub_api.tasks.courtesy_notifications import send_courtesy_granted_sync


@celery_app.task(
    name=COURTESY_GRANTED_TASK,
    queue=settings.courtesy_notification_task_queue,
)
def send_granted_notification(courtesy_id: str) -> dict[str, object]:
    """Celery entrypoint for emailing the beneficiary of a new courtesy."""

    try:
        return send_courtesy_granted_sync(courtesy_id)
    except Exception:  # pragma: no cover - Celery records the failure
        logger.exception("Courtesy notification task failed", courtesy_id=courtesy_id)
        raise
