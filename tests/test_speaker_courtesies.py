from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select

from eventhub_api.core.messages import get_localizer
from eventhub_api.models.courtesy import Courtesy, CourtesyScope, CourtesyStatus, CourtesyType
from eventhub_api.models.person import DocumentType, Person
from eventhub_api.observability.courtesies import get_courtesy_store
from eventhub_api.services.courtesies import (
    CourtesyService,
    EventHasNoSpeakersError,
    EventNotFoundError,
    GrantRequest,
)

SPEAKER_NAMES = [
    ("Carmen", "Zavala"),
    ("Jorge", "Alvarado"),
    ("Rosa", "Mendoza"),
    ("Luis", "Benavides"),
    ("Elena", "Castro"),
]


@pytest.mark.asyncio
async def test_batch_continues_past_conflicting_speaker(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    speakers = await seed.speakers(event, SPEAKER_NAMES)
    conflicting = speakers[2]
    # Someone else already holds the placeholder document this speaker would get.
    await seed.person(
        first_name="Otra",
        last_name="Persona",
        email="otra.persona@example.com",
        document_type=DocumentType.OTHER,
        document_number=f"SPEAKER-{conflicting.id.hex[:8]}",
    )
    store = get_courtesy_store()
    store.reset()

    report = await CourtesyService(session_factory).grant_speaker_courtesies_report(
        event.id, CourtesyScope.ASSIGNED_SESSIONS_ONLY, admin
    )

    assert len(report.created) == 4
    assert report.skipped == []
    assert [failure.speaker_id for failure in report.failed] == [conflicting.id]
    assert "PersonConflictError" in report.failed[0].error
    assert report.processed == 5

    expected_reason = get_localizer().translate("courtesies.speaker_auto_reason", "es")
    for courtesy in report.created:
        assert courtesy.type == CourtesyType.SPEAKER
        assert courtesy.scope == CourtesyScope.ASSIGNED_SESSIONS_ONLY
        assert courtesy.status == CourtesyStatus.ACTIVE
        assert courtesy.reason == expected_reason
        assert courtesy.speaker_id is not None
    assert conflicting.id not in {courtesy.speaker_id for courtesy in report.created}

    async with session_factory() as session:
        stored = (await session.execute(select(Courtesy))).scalars().all()
        placeholders = (
            await session.execute(select(Person).where(Person.document_type == DocumentType.OTHER))
        ).scalars().all()
    assert len(stored) == 4
    assert len(placeholders) == 5

    snapshot = store.snapshot()
    assert snapshot.speaker_batches == {"created": 4, "failed": 1}


@pytest.mark.asyncio
async def test_batch_processes_speakers_alphabetically(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    await seed.speakers(event, SPEAKER_NAMES)

    created = await CourtesyService(session_factory).grant_speaker_courtesies(
        event.id, CourtesyScope.FULL_EVENT, admin, locale="en"
    )

    last_names = [courtesy.person.last_name for courtesy in created]
    assert last_names == sorted(last_names)
    assert all(courtesy.registration is not None for courtesy in created)
    assert {courtesy.reason for courtesy in created} == {"Automatic speaker courtesy"}


@pytest.mark.asyncio
async def test_batch_skips_speakers_with_open_courtesy(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    speakers = await seed.speakers(event, SPEAKER_NAMES[:2])
    service = CourtesyService(session_factory)
    first = await service.grant_speaker_courtesies_report(event.id, CourtesyScope.ASSIGNED_SESSIONS_ONLY, admin)

    second = await service.grant_speaker_courtesies_report(event.id, CourtesyScope.ASSIGNED_SESSIONS_ONLY, admin)

    assert len(first.created) == 2
    assert second.created == []
    assert set(second.skipped) == {speaker.id for speaker in speakers}
    assert second.failed == []


@pytest.mark.asyncio
async def test_batch_reuses_person_matched_by_email(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    (speaker,) = await seed.speakers(event, [("Diego", "Paredes")])
    person = await seed.person(
        first_name="Diego",
        last_name="Paredes",
        email=speaker.email.upper(),
        document_number="41234567",
    )

    created = await CourtesyService(session_factory).grant_speaker_courtesies(
        event.id, CourtesyScope.ASSIGNED_SESSIONS_ONLY, admin
    )

    assert [courtesy.person_id for courtesy in created] == [person.id]
    assert created[0].speaker_id == speaker.id


@pytest.mark.asyncio
async def test_batch_speaker_with_manual_courtesy_is_skipped(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    (speaker,) = await seed.speakers(event, [("Marta", "Salas")])
    person = await seed.person(first_name="Marta", last_name="Salas", email=speaker.email)
    service = CourtesyService(session_factory)
    await service.grant(
        GrantRequest(
            event_id=event.id,
            person_id=person.id,
            type=CourtesyType.VIP,
            scope=CourtesyScope.FULL_EVENT,
        ),
        admin,
    )

    report = await service.grant_speaker_courtesies_report(event.id, CourtesyScope.FULL_EVENT, admin)

    assert report.created == []
    assert report.skipped == [speaker.id]


@pytest.mark.asyncio
async def test_batch_requires_speakers_and_event(session_factory, seed) -> None:
    admin = await seed.user()
    event = await seed.event()
    service = CourtesyService(session_factory)

    with pytest.raises(EventHasNoSpeakersError):
        await service.grant_speaker_courtesies(event.id, CourtesyScope.FULL_EVENT, admin)

    with pytest.raises(EventNotFoundError):
        await service.grant_speaker_courtesies(uuid4(), CourtesyScope.FULL_EVENT, admin)
