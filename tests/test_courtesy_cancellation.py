from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select, update

from eventhub_api.models.courtesy import Courtesy, CourtesyScope, CourtesyStatus, CourtesyType
from eventhub_api.models.evaluation import BlockEnrollment, BlockEnrollmentStatus
from eventhub_api.models.registration import Registration, RegistrationStatus
from eventhub_api.observability.courtesies import get_courtesy_store
from eventhub_api.services.courtesies import (
    CancelRequest,
    CourtesyAlreadyGrantedError,
    CourtesyNotActiveError,
    CourtesyRecordNotFoundError,
    CourtesyService,
    GrantRequest,
)


@pytest.mark.asyncio
async def test_cancel_full_event_courtesy_cancels_registration(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()
    service = CourtesyService(session_factory)
    courtesy = await service.grant(
        GrantRequest(
            event_id=event.id,
            person_id=person.id,
            type=CourtesyType.VIP,
            scope=CourtesyScope.FULL_EVENT,
        ),
        admin,
    )
    registration_id = courtesy.registration.id

    cancelled = await service.cancel(courtesy.id, CancelRequest(reason="Cambio de lista"), admin)

    assert cancelled.status == CourtesyStatus.CANCELLED
    assert cancelled.registration.status == RegistrationStatus.CANCELLED
    async with session_factory() as session:
        registration = await session.get(Registration, registration_id)
    assert registration.status == RegistrationStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_leaves_unrelated_enrollments_untouched(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    covered = await seed.block(event, name="Bloque cubierto")
    other = await seed.block(event, name="Bloque pagado")
    person = await seed.person()
    attendee = await seed.attendee(person)
    async with session_factory() as session:
        paid = BlockEnrollment(
            block_id=other.id,
            attendee_id=attendee.id,
            status=BlockEnrollmentStatus.ENROLLED,
        )
        session.add(paid)
        await session.commit()

    service = CourtesyService(session_factory)
    courtesy = await service.grant(
        GrantRequest(
            event_id=event.id,
            person_id=person.id,
            type=CourtesyType.OTHER,
            scope=CourtesyScope.SPECIFIC_BLOCKS,
            specific_block_ids=(covered.id,),
        ),
        admin,
    )
    await service.cancel(courtesy.id, CancelRequest(reason="test"), admin)

    async with session_factory() as session:
        rows = (await session.execute(select(BlockEnrollment))).scalars().all()
    statuses = {row.block_id: row.status for row in rows}
    assert statuses[covered.id] == BlockEnrollmentStatus.CANCELLED
    assert statuses[other.id] == BlockEnrollmentStatus.ENROLLED


@pytest.mark.asyncio
async def test_cancel_twice_is_rejected(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()
    store = get_courtesy_store()
    store.reset()
    service = CourtesyService(session_factory)
    courtesy = await service.grant(
        GrantRequest(
            event_id=event.id,
            person_id=person.id,
            type=CourtesyType.VIP,
            scope=CourtesyScope.FULL_EVENT,
        ),
        admin,
    )
    await service.cancel(courtesy.id, CancelRequest(reason="primera"), admin)

    with pytest.raises(CourtesyNotActiveError) as excinfo:
        await service.cancel(courtesy.id, CancelRequest(reason="segunda"), admin)

    assert excinfo.value.params["from_status"] == "CANCELLED"
    stored = await service.find_one(courtesy.id)
    assert stored.cancellation_reason == "primera"
    snapshot = store.snapshot()
    assert snapshot.cancellations["cancelled"] == 1
    assert snapshot.cancellations["rejected:cancelled"] == 1


@pytest.mark.asyncio
async def test_cancel_unknown_courtesy(session_factory, seed) -> None:
    admin = await seed.user()

    with pytest.raises(CourtesyRecordNotFoundError):
        await CourtesyService(session_factory).cancel(uuid4(), CancelRequest(reason="x"), admin)


@pytest.mark.asyncio
async def test_used_courtesy_blocks_regrant_and_cancellation(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()
    service = CourtesyService(session_factory)
    request = GrantRequest(
        event_id=event.id,
        person_id=person.id,
        type=CourtesyType.VIP,
        scope=CourtesyScope.FULL_EVENT,
    )
    courtesy = await service.grant(request, admin)
    async with session_factory() as session:
        await session.execute(
            update(Courtesy).where(Courtesy.id == courtesy.id).values(status=CourtesyStatus.USED)
        )
        await session.commit()

    with pytest.raises(CourtesyAlreadyGrantedError):
        await service.grant(request, admin)

    with pytest.raises(CourtesyNotActiveError) as excinfo:
        await service.cancel(courtesy.id, CancelRequest(reason="tarde"), admin)

    assert excinfo.value.params["from_status"] == "USED"
    stored = await service.find_one(courtesy.id)
    assert stored.status == CourtesyStatus.USED
    assert stored.cancellation_reason is None
    async with session_factory() as session:
        registrations = (
            await session.execute(select(Registration).where(Registration.courtesy_id == courtesy.id))
        ).scalars().all()
    assert [item.status for item in registrations] == [RegistrationStatus.CONFIRMED]
