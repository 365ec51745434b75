"""API endpoints for granting, cancelling and inspecting courtesies."""

from __future__ import annotations

from datetime import datetime
from typing import List, NoReturn, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from eventhub_api.api.dependencies.locale import request_locale
from eventhub_api.api.dependencies.services import get_courtesy_service
from eventhub_api.api.dependencies.session import require_courtesy_admin, require_session_user
from eventhub_api.core.errors import DomainError, ErrorKind
from eventhub_api.core.messages import get_localizer
from eventhub_api.models.courtesy import Courtesy, CourtesyScope, CourtesyStatus, CourtesyType
from eventhub_api.models.person import DocumentType
from eventhub_api.models.user import User
from eventhub_api.services.courtesies import CancelRequest, CourtesyService, GrantRequest
from eventhub_api.services.identity import PersonData


router = APIRouter(prefix="/courtesies", tags=["courtesies"])


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
}


class PersonDataPayload(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=120)
    lastName: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3)
    documentType: DocumentType = Field(DocumentType.DNI, description="Identity document type")
    documentNumber: str = Field(..., min_length=1, max_length=32)
    phone: Optional[str] = None
    country: Optional[str] = None


class GrantCourtesyRequest(BaseModel):
    eventId: UUID
    personId: Optional[UUID] = Field(None, description="Existing person receiving the courtesy")
    personData: Optional[PersonDataPayload] = Field(None, description="Data used to find or create the person")
    type: CourtesyType
    scope: CourtesyScope
    specificBlockIds: Optional[List[UUID]] = Field(None, description="Blocks covered when scope is SPECIFIC_BLOCKS")
    speakerId: Optional[UUID] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    validUntil: Optional[datetime] = None


class CancelCourtesyRequest(BaseModel):
    reason: str = Field(..., min_length=1, description="Why the courtesy is being cancelled")


class GrantSpeakerCourtesiesRequest(BaseModel):
    scope: CourtesyScope = Field(CourtesyScope.ASSIGNED_SESSIONS_ONLY, description="Scope applied to every speaker")


class PersonSummary(BaseModel):
    id: UUID
    firstName: str
    lastName: str
    email: str


class CourtesyResponse(BaseModel):
    id: UUID
    eventId: UUID
    eventTitle: Optional[str]
    personId: UUID
    person: Optional[PersonSummary]
    attendeeId: Optional[UUID]
    speakerId: Optional[UUID]
    type: CourtesyType
    scope: CourtesyScope
    status: CourtesyStatus
    reason: Optional[str]
    notes: Optional[str]
    validUntil: Optional[datetime]
    grantedById: Optional[UUID]
    grantedAt: datetime
    cancelledById: Optional[UUID]
    cancelledAt: Optional[datetime]
    cancellationReason: Optional[str]
    specificBlockIds: List[UUID]
    registrationId: Optional[UUID]
    blockEnrollmentIds: List[UUID]


class SpeakerFailureResponse(BaseModel):
    speakerId: UUID
    error: str


class SpeakerCourtesiesResponse(BaseModel):
    created: List[CourtesyResponse]
    skippedSpeakerIds: List[UUID]
    failed: List[SpeakerFailureResponse]


def _serialize_courtesy(courtesy: Courtesy) -> CourtesyResponse:
    person = courtesy.person
    return CourtesyResponse(
        id=courtesy.id,
        eventId=courtesy.event_id,
        eventTitle=courtesy.event.title if courtesy.event else None,
        personId=courtesy.person_id,
        person=(
            PersonSummary(
                id=person.id,
                firstName=person.first_name,
                lastName=person.last_name,
                email=person.email,
            )
            if person
            else None
        ),
        attendeeId=courtesy.attendee_id,
        speakerId=courtesy.speaker_id,
        type=courtesy.type,
        scope=courtesy.scope,
        status=courtesy.status,
        reason=courtesy.reason,
        notes=courtesy.notes,
        validUntil=courtesy.valid_until,
        grantedById=courtesy.granted_by_id,
        grantedAt=courtesy.granted_at,
        cancelledById=courtesy.cancelled_by_id,
        cancelledAt=courtesy.cancelled_at,
        cancellationReason=courtesy.cancellation_reason,
        specificBlockIds=[block.id for block in courtesy.specific_blocks],
        registrationId=courtesy.registration.id if courtesy.registration else None,
        blockEnrollmentIds=[enrollment.id for enrollment in courtesy.block_enrollments],
    )


def _raise_http(error: DomainError, locale: str) -> NoReturn:
    raise HTTPException(
        status_code=_STATUS_BY_KIND[error.kind],
        detail={
            "code": error.message_key,
            "kind": error.kind.value,
            "message": get_localizer().translate(error.message_key, locale, **error.params),
        },
    ) from error


def _to_person_data(payload: PersonDataPayload | None) -> PersonData | None:
    if payload is None:
        return None
    return PersonData(
        first_name=payload.firstName,
        last_name=payload.lastName,
        email=payload.email,
        document_type=payload.documentType,
        document_number=payload.documentNumber,
        phone=payload.phone,
        country=payload.country,
    )


@router.post("", response_model=CourtesyResponse, status_code=status.HTTP_201_CREATED)
async def grant_courtesy(
    payload: GrantCourtesyRequest,
    admin: User = Depends(require_courtesy_admin),
    service: CourtesyService = Depends(get_courtesy_service),
    locale: str = Depends(request_locale),
) -> CourtesyResponse:
    """Grant a courtesy and provision its free access records."""

    request = GrantRequest(
        event_id=payload.eventId,
        type=payload.type,
        scope=payload.scope,
        person_id=payload.personId,
        person_data=_to_person_data(payload.personData),
        specific_block_ids=tuple(payload.specificBlockIds or ()),
        speaker_id=payload.speakerId,
        reason=payload.reason,
        notes=payload.notes,
        valid_until=payload.validUntil,
    )
    try:
        courtesy = await service.grant(request, admin)
    except DomainError as error:
        _raise_http(error, locale)
    return _serialize_courtesy(courtesy)


@router.delete("/{courtesy_id}", response_model=CourtesyResponse)
async def cancel_courtesy(
    courtesy_id: UUID,
    payload: CancelCourtesyRequest,
    admin: User = Depends(require_courtesy_admin),
    service: CourtesyService = Depends(get_courtesy_service),
    locale: str = Depends(request_locale),
) -> CourtesyResponse:
    try:
        courtesy = await service.cancel(courtesy_id, CancelRequest(reason=payload.reason), admin)
    except DomainError as error:
        _raise_http(error, locale)
    return _serialize_courtesy(courtesy)


@router.get("/event/{event_id}", response_model=List[CourtesyResponse])
async def list_event_courtesies(
    event_id: UUID,
    _: User = Depends(require_courtesy_admin),
    service: CourtesyService = Depends(get_courtesy_service),
) -> List[CourtesyResponse]:
    courtesies = await service.find_by_event(event_id)
    return [_serialize_courtesy(courtesy) for courtesy in courtesies]


@router.get("/event/{event_id}/stats")
async def get_event_courtesy_stats(
    event_id: UUID,
    _: User = Depends(require_courtesy_admin),
    service: CourtesyService = Depends(get_courtesy_service),
) -> dict[str, object]:
    stats = await service.get_event_stats(event_id)
    return stats.as_dict()


@router.post(
    "/event/{event_id}/grant-speakers",
    response_model=SpeakerCourtesiesResponse,
    status_code=status.HTTP_201_CREATED,
)
async def grant_speaker_courtesies(
    event_id: UUID,
    payload: GrantSpeakerCourtesiesRequest,
    admin: User = Depends(require_courtesy_admin),
    service: CourtesyService = Depends(get_courtesy_service),
    locale: str = Depends(request_locale),
) -> SpeakerCourtesiesResponse:
    """Grant a SPEAKER courtesy to every speaker of the event; failures do not abort the batch."""

    try:
        report = await service.grant_speaker_courtesies_report(event_id, payload.scope, admin, locale=locale)
    except DomainError as error:
        _raise_http(error, locale)
    return SpeakerCourtesiesResponse(
        created=[_serialize_courtesy(courtesy) for courtesy in report.created],
        skippedSpeakerIds=list(report.skipped),
        failed=[SpeakerFailureResponse(speakerId=item.speaker_id, error=item.error) for item in report.failed],
    )


@router.get("/person/{person_id}", response_model=List[CourtesyResponse])
async def list_person_courtesies(
    person_id: UUID,
    _: User = Depends(require_session_user),
    service: CourtesyService = Depends(get_courtesy_service),
) -> List[CourtesyResponse]:
    courtesies = await service.find_by_person(person_id)
    return [_serialize_courtesy(courtesy) for courtesy in courtesies]


@router.get("/{courtesy_id}", response_model=CourtesyResponse)
async def get_courtesy(
    courtesy_id: UUID,
    _: User = Depends(require_session_user),
    service: CourtesyService = Depends(get_courtesy_service),
    locale: str = Depends(request_locale),
) -> CourtesyResponse:
    try:
        courtesy = await service.find_one(courtesy_id)
    except DomainError as error:
        _raise_http(error, locale)
    return _serialize_courtesy(courtesy)
