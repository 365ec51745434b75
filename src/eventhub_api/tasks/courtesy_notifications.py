"""Courtesy notification helpers.

Lets Celery or a CLI runner send the "courtesy granted" email through the same
service layer the API uses.
"""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhub_api.db.session import async_session
from eventhub_api.services.notifications.backend import EmailBackend
from eventhub_api.services.notifications.service import NotificationService


async def send_courtesy_granted(
    courtesy_id: UUID,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    backend: EmailBackend | None = None,
) -> dict[str, Any]:
    factory = session_factory or async_session
    async with factory() as session:
        service = NotificationService(session, backend=backend)
        event = await service.send_courtesy_granted(courtesy_id)
    return {
        "courtesyId": str(courtesy_id),
        "sent": event is not None,
        "recipient": event.recipient if event else None,
    }


def send_courtesy_granted_sync(
    courtesy_id: str | UUID,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    backend: EmailBackend | None = None,
) -> dict[str, Any]:
    """Convenience wrapper so Celery can call the async helper."""

    return asyncio.run(
        send_courtesy_granted(UUID(str(courtesy_id)), session_factory=session_factory, backend=backend)
    )


__all__ = ["send_courtesy_granted", "send_courtesy_granted_sync"]
