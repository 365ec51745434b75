"""High-level notification service for courtesy emails."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub_api.core.settings import get_settings
from eventhub_api.models.courtesy import Courtesy, CourtesyStatus

from .backend import EmailBackend, SMTPEmailBackend
from .templates import render_courtesy_granted


@dataclass
class NotificationEvent:
    """Representation of a notification that was sent."""

    recipient: str
    subject: str
    body_text: str
    body_html: str | None
    event_type: str
    metadata: dict[str, Any]


class NotificationService:
    """Coordinates notification delivery via pluggable backends."""

    def __init__(
        self,
        db_session: AsyncSession,
        backend: Optional[EmailBackend] = None,
    ) -> None:
        self._db = db_session
        self._backend = backend or self._build_default_backend()
        self._events: list[NotificationEvent] = []

    @property
    def sent_events(self) -> list[NotificationEvent]:
        return self._events

    async def send_courtesy_granted(self, courtesy_id: UUID, *, locale: str | None = None) -> NotificationEvent | None:
        """Email the beneficiary of an active courtesy; returns the sent event, if any."""

        if self._backend is None:
            logger.info("Email backend not configured; skipping courtesy notification", courtesy_id=str(courtesy_id))
            return None

        stmt = (
            select(Courtesy)
            .where(Courtesy.id == courtesy_id)
            .options(
                selectinload(Courtesy.person),
                selectinload(Courtesy.event),
                selectinload(Courtesy.specific_blocks),
            )
        )
        result = await self._db.execute(stmt)
        courtesy = result.scalar_one_or_none()
        if courtesy is None:
            logger.warning("Courtesy not found for notification", courtesy_id=str(courtesy_id))
            return None
        if courtesy.status != CourtesyStatus.ACTIVE:
            logger.info(
                "Courtesy no longer active; skipping notification",
                courtesy_id=str(courtesy_id),
                status=courtesy.status.value,
            )
            return None

        template = render_courtesy_granted(
            courtesy,
            courtesy.person,
            courtesy.event,
            block_names=[block.name for block in courtesy.specific_blocks],
            locale=locale or get_settings().default_locale,
        )
        recipient = courtesy.person.email
        await self._backend.send_email(
            recipient,
            template.subject,
            template.text_body,
            body_html=template.html_body,
            headers={"X-Courtesy-Id": str(courtesy.id)},
        )

        event = NotificationEvent(
            recipient=recipient,
            subject=template.subject,
            body_text=template.text_body,
            body_html=template.html_body,
            event_type="courtesy_granted",
            metadata={
                "courtesy_id": str(courtesy.id),
                "event_id": str(courtesy.event_id),
                "scope": courtesy.scope.value,
            },
        )
        self._events.append(event)
        logger.info("Courtesy notification sent", courtesy_id=str(courtesy.id))
        return event

    def _build_default_backend(self) -> Optional[EmailBackend]:
        return SMTPEmailBackend.from_settings(get_settings())


__all__ = ["NotificationEvent", "NotificationService"]
