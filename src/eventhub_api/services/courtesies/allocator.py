"""Single courtesy grant: validation, insert and provisioning in one unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.courtesy import OPEN_COURTESY_STATUSES, Courtesy, CourtesyStatus
from eventhub_api.models.event import Event, EventStatus
from eventhub_api.models.user import User
from eventhub_api.observability.courtesies import CourtesyAuditTrail
from eventhub_api.services.courtesies.errors import (
    CourtesyAlreadyGrantedError,
    EventCancelledError,
    EventNotFoundError,
    SpeakerNotFoundError,
)
from eventhub_api.services.courtesies.loading import reload_courtesy
from eventhub_api.services.courtesies.provisioner import AccessProvisioner, ProvisioningReport
from eventhub_api.services.courtesies.requests import GrantRequest
from eventhub_api.services.courtesies.scope import ScopeValidator
from eventhub_api.services.identity.attendees import AttendeeMaterializer
from eventhub_api.services.identity.resolver import IdentityResolver


@dataclass
class GrantOutcome:
    courtesy: Courtesy
    provisioning: ProvisioningReport


class CourtesyAllocator:
    """Grant a courtesy inside the caller's unit of work.

    Nothing is committed here; the unit of work commits or rolls back the
    courtesy, its attendee and its access records together.
    """

    def __init__(self, uow: UnitOfWork, audit: CourtesyAuditTrail) -> None:
        self._uow = uow
        self._audit = audit
        self._identity = IdentityResolver(uow.session)
        self._attendees = AttendeeMaterializer(uow.session)
        self._scope = ScopeValidator(uow)
        self._provisioner = AccessProvisioner(uow, audit.child("courtesies.provisioner"))

    async def grant(self, request: GrantRequest, grantor: User) -> GrantOutcome:
        event = await self._load_event(request)

        person = await self._identity.resolve(person_id=request.person_id, person_data=request.person_data)
        attendee = await self._attendees.materialize(person)

        already_granted = await self._uow.courtesies.exists(
            Courtesy.event_id == event.id,
            Courtesy.person_id == person.id,
            Courtesy.status.in_(OPEN_COURTESY_STATUSES),
        )
        if already_granted:
            self._audit.grant_rejected(reason="already_granted", event_id=event.id, person_id=str(person.id))
            raise CourtesyAlreadyGrantedError(event_id=str(event.id), person_id=str(person.id))

        blocks = await self._scope.resolve_blocks(request.scope, event.id, request.specific_block_ids)

        speaker = None
        if request.speaker_id is not None:
            speaker = await self._uow.speakers.get(request.speaker_id)
            if speaker is None:
                raise SpeakerNotFoundError(speaker_id=str(request.speaker_id))

        courtesy = self._uow.courtesies.add(
            Courtesy(
                id=uuid4(),
                event_id=event.id,
                person_id=person.id,
                attendee_id=attendee.id,
                speaker_id=speaker.id if speaker is not None else None,
                type=request.type,
                scope=request.scope,
                status=CourtesyStatus.ACTIVE,
                reason=request.reason or None,
                notes=request.notes or None,
                valid_until=request.valid_until,
                granted_by_id=grantor.id,
                granted_at=datetime.now(timezone.utc),
                specific_blocks=blocks,
            )
        )
        # A failed flush rolls the session back and expires loaded instances.
        event_id, person_id = event.id, person.id
        try:
            await self._uow.flush()
        except IntegrityError as exc:
            self._audit.grant_rejected(reason="already_granted", event_id=event_id, person_id=str(person_id))
            raise CourtesyAlreadyGrantedError(event_id=str(event_id), person_id=str(person_id)) from exc

        report = await self._provisioner.provision(courtesy, attendee, event)
        courtesy = await reload_courtesy(self._uow.session, courtesy.id)
        return GrantOutcome(courtesy=courtesy, provisioning=report)

    async def _load_event(self, request: GrantRequest) -> Event:
        event = await self._uow.events.find_one(Event.id == request.event_id, Event.is_active.is_(True))
        if event is None:
            self._audit.grant_rejected(reason="event_not_found", event_id=request.event_id)
            raise EventNotFoundError(event_id=str(request.event_id))
        if event.status == EventStatus.CANCELLED:
            self._audit.grant_rejected(reason="event_cancelled", event_id=event.id)
            raise EventCancelledError(event_id=str(event.id))
        return event


__all__ = ["CourtesyAllocator", "GrantOutcome"]
