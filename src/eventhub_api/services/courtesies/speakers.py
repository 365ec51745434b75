"""Automatic courtesies for every speaker of an event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from eventhub_api.core.messages import MessageLocalizer
from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.courtesy import OPEN_COURTESY_STATUSES, Courtesy, CourtesyScope, CourtesyType
from eventhub_api.models.event import Event
from eventhub_api.models.person import DocumentType, Person
from eventhub_api.models.speaker import Speaker
from eventhub_api.models.user import User
from eventhub_api.observability.courtesies import CourtesyAuditTrail
from eventhub_api.services.courtesies.errors import (
    CourtesyError,
    EventHasNoSpeakersError,
    EventNotFoundError,
)
from eventhub_api.services.courtesies.requests import GrantRequest
from eventhub_api.services.identity.errors import IdentityError
from eventhub_api.services.identity.resolver import IdentityResolver, PersonData

GrantFn = Callable[[GrantRequest, User], Awaitable[Courtesy]]


@dataclass
class SpeakerGrantFailure:
    speaker_id: UUID
    error: str


@dataclass
class SpeakerGrantReport:
    created: list[Courtesy] = field(default_factory=list)
    skipped: list[UUID] = field(default_factory=list)
    failed: list[SpeakerGrantFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.created) + len(self.skipped) + len(self.failed)


class SpeakerCourtesyOrchestrator:
    """Grant one courtesy per speaker, each in its own transaction.

    A failing speaker is logged and reported; grants already committed for
    other speakers stay in place.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        grant: GrantFn,
        audit: CourtesyAuditTrail,
        *,
        localizer: MessageLocalizer,
        placeholder_prefix: str,
        isolation_level: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._grant = grant
        self._audit = audit
        self._localizer = localizer
        self._placeholder_prefix = placeholder_prefix
        self._isolation_level = isolation_level

    async def grant_all(
        self,
        event_id: UUID,
        scope: CourtesyScope,
        grantor: User,
        *,
        locale: str | None = None,
    ) -> SpeakerGrantReport:
        speakers = await self._load_speakers(event_id)
        reason = self._localizer.translate("courtesies.speaker_auto_reason", locale)

        report = SpeakerGrantReport()
        for speaker in speakers:
            try:
                person = await self._resolve_person(speaker)
            except (IdentityError, SQLAlchemyError) as exc:
                report.failed.append(SpeakerGrantFailure(speaker_id=speaker.id, error=repr(exc)))
                self._audit.speaker_outcome("failed", speaker_id=speaker.id, stage="identity", error=repr(exc))
                continue

            try:
                if await self._has_open_courtesy(event_id, person.id):
                    report.skipped.append(speaker.id)
                    self._audit.speaker_outcome("skipped", speaker_id=speaker.id, person_id=str(person.id))
                    continue

                courtesy = await self._grant(
                    GrantRequest(
                        event_id=event_id,
                        person_id=person.id,
                        type=CourtesyType.SPEAKER,
                        scope=scope,
                        speaker_id=speaker.id,
                        reason=reason,
                    ),
                    grantor,
                )
            except (CourtesyError, IdentityError, SQLAlchemyError) as exc:
                report.failed.append(SpeakerGrantFailure(speaker_id=speaker.id, error=repr(exc)))
                self._audit.speaker_outcome("failed", speaker_id=speaker.id, stage="grant", error=repr(exc))
                continue

            report.created.append(courtesy)
            self._audit.speaker_outcome("created", speaker_id=speaker.id, courtesy_id=str(courtesy.id))

        self._audit.info(
            "Speaker courtesies processed",
            event_id=str(event_id),
            speakers=len(speakers),
            created=len(report.created),
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report

    async def _load_speakers(self, event_id: UUID) -> list[Speaker]:
        async with UnitOfWork(self._session_factory) as uow:
            event = await uow.events.find_one(
                Event.id == event_id,
                Event.is_active.is_(True),
                options=(selectinload(Event.speakers),),
            )
            if event is None:
                raise EventNotFoundError(event_id=str(event_id))
            speakers = sorted(event.speakers, key=lambda item: (item.last_name, item.first_name, str(item.id)))
        if not speakers:
            raise EventHasNoSpeakersError(event_id=str(event_id))
        return speakers

    async def _resolve_person(self, speaker: Speaker) -> Person:
        async with UnitOfWork(self._session_factory, isolation_level=self._isolation_level) as uow:
            resolver = IdentityResolver(uow.session)
            person = await resolver.find_by_email(speaker.email)
            if person is None:
                person = await resolver.create(
                    PersonData(
                        first_name=speaker.first_name,
                        last_name=speaker.last_name,
                        email=speaker.email,
                        document_type=DocumentType.OTHER,
                        document_number=self.placeholder_document_number(speaker),
                        phone=speaker.phone_number,
                    )
                )
        return person

    async def _has_open_courtesy(self, event_id: UUID, person_id: UUID) -> bool:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.courtesies.exists(
                Courtesy.event_id == event_id,
                Courtesy.person_id == person_id,
                Courtesy.status.in_(OPEN_COURTESY_STATUSES),
            )

    def placeholder_document_number(self, speaker: Speaker) -> str:
        return f"{self._placeholder_prefix}{speaker.id.hex[:8]}"


__all__ = [
    "SpeakerCourtesyOrchestrator",
    "SpeakerGrantFailure",
    "SpeakerGrantReport",
]
