"""Best-effort hand-off of courtesy notifications to the worker queue."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal, Protocol
from uuid import UUID

from celery import Celery

from eventhub_api.celery_app import celery_app
from eventhub_api.core.settings import settings

COURTESY_GRANTED_TASK = "courtesies.send_granted_notification"

DispatchStatus = Literal["queued", "disabled", "failed"]


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a notification hand-off; callers may ignore it."""

    status: DispatchStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class NotificationDispatcher(Protocol):
    async def courtesy_granted(self, courtesy_id: UUID) -> DispatchResult:
        ...


class DisabledNotificationDispatcher:
    async def courtesy_granted(self, courtesy_id: UUID) -> DispatchResult:
        return DispatchResult(status="disabled")


class CeleryNotificationDispatcher:
    """Enqueue the courtesy email task; broker errors end up in the result."""

    def __init__(self, app: Celery, *, queue: str | None = None) -> None:
        self._app = app
        self._queue = queue or settings.courtesy_notification_task_queue

    async def courtesy_granted(self, courtesy_id: UUID) -> DispatchResult:
        try:
            async_result = await asyncio.to_thread(
                self._app.send_task,
                COURTESY_GRANTED_TASK,
                args=[str(courtesy_id)],
                queue=self._queue,
            )
        except Exception as exc:  # noqa: BLE001 - best effort enqueue
            return DispatchResult(status="failed", detail=repr(exc))
        return DispatchResult(status="queued", detail=getattr(async_result, "id", None))


def build_notification_dispatcher() -> NotificationDispatcher:
    if not settings.courtesy_notifications_enabled:
        return DisabledNotificationDispatcher()

    return CeleryNotificationDispatcher(celery_app)


__all__ = [
    "COURTESY_GRANTED_TASK",
    "CeleryNotificationDispatcher",
    "DispatchResult",
    "DisabledNotificationDispatcher",
    "NotificationDispatcher",
    "build_notification_dispatcher",
]
