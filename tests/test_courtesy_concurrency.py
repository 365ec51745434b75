from __future__ import annotations

import asyncio
import sqlite3
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventhub_api.db.unit_of_work import Repository
from eventhub_api.models.courtesy import Courtesy, CourtesyScope, CourtesyStatus, CourtesyType
from eventhub_api.models.registration import Registration
from eventhub_api.models.user import User, UserRoleEnum
from eventhub_api.services.courtesies import (
    CourtesyAlreadyGrantedError,
    CourtesyConflictError,
    CourtesyService,
    GrantRequest,
)
from eventhub_api.services.courtesies.service import _is_serialization_failure


@pytest.mark.asyncio
async def test_concurrent_grants_for_same_person_yield_one_courtesy(file_session_factory, file_seed) -> None:
    admin = await file_seed.user()
    event = await file_seed.event()
    person = await file_seed.person()
    await file_seed.attendee(person)
    service = CourtesyService(file_session_factory)
    request = GrantRequest(
        event_id=event.id,
        person_id=person.id,
        type=CourtesyType.VIP,
        scope=CourtesyScope.FULL_EVENT,
    )

    results = await asyncio.gather(
        service.grant(request, admin),
        service.grant(request, admin),
        return_exceptions=True,
    )

    granted = [item for item in results if isinstance(item, Courtesy)]
    conflicts = [item for item in results if isinstance(item, CourtesyConflictError)]
    assert len(granted) == 1, results
    assert len(conflicts) == 1, results

    async with file_session_factory() as session:
        courtesies = (await session.execute(select(Courtesy))).scalars().all()
        registrations = (await session.execute(select(Registration))).scalars().all()
    assert [item.status for item in courtesies] == [CourtesyStatus.ACTIVE]
    assert len(registrations) == 1
    assert registrations[0].courtesy_id == granted[0].id


@pytest.mark.asyncio
async def test_open_courtesy_index_rejects_second_active_row(file_session_factory, file_seed) -> None:
    admin = await file_seed.user()
    event = await file_seed.event()
    person = await file_seed.person()
    service = CourtesyService(file_session_factory)
    first = await service.grant(
        GrantRequest(
            event_id=event.id,
            person_id=person.id,
            type=CourtesyType.VIP,
            scope=CourtesyScope.ASSIGNED_SESSIONS_ONLY,
        ),
        admin,
    )

    async with file_session_factory() as session:
        session.add(
            Courtesy(
                event_id=event.id,
                person_id=person.id,
                type=CourtesyType.PRESS,
                scope=CourtesyScope.FULL_EVENT,
                status=CourtesyStatus.ACTIVE,
            )
        )
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()

        session.add(
            Courtesy(
                event_id=event.id,
                person_id=person.id,
                type=CourtesyType.PRESS,
                scope=CourtesyScope.FULL_EVENT,
                status=CourtesyStatus.CANCELLED,
            )
        )
        await session.commit()

    stored = await service.find_by_event(event.id)
    assert {item.status for item in stored} == {CourtesyStatus.ACTIVE, CourtesyStatus.CANCELLED}
    assert first.id in {item.id for item in stored}


@pytest.mark.asyncio
async def test_index_violation_at_flush_is_reported_as_already_granted(
    file_session_factory, file_seed, monkeypatch
) -> None:
    admin = await file_seed.user()
    event = await file_seed.event()
    person = await file_seed.person()
    service = CourtesyService(file_session_factory)
    request = GrantRequest(
        event_id=event.id,
        person_id=person.id,
        type=CourtesyType.VIP,
        scope=CourtesyScope.FULL_EVENT,
    )
    first = await service.grant(request, admin)

    async def never_exists(self, *criteria):
        return False

    # Skip the pre-check so the insert races straight into the unique index.
    monkeypatch.setattr(Repository, "exists", never_exists)

    with pytest.raises(CourtesyAlreadyGrantedError) as excinfo:
        await service.grant(request, admin)

    assert excinfo.value.params == {"event_id": str(event.id), "person_id": str(person.id)}
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    stored = await service.find_by_event(event.id)
    assert [item.id for item in stored] == [first.id]


@pytest.mark.asyncio
async def test_missing_schema_is_not_reported_as_conflict(tmp_path) -> None:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", future=True)
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    admin = User(id=uuid4(), email="admin@example.com", role=UserRoleEnum.ORG_ADMIN)

    try:
        with pytest.raises(OperationalError) as excinfo:
            await CourtesyService(factory).grant(
                GrantRequest(
                    event_id=uuid4(),
                    person_id=uuid4(),
                    type=CourtesyType.VIP,
                    scope=CourtesyScope.FULL_EVENT,
                ),
                admin,
            )
    finally:
        await engine.dispose()

    assert "no such table" in str(excinfo.value)
    assert not isinstance(excinfo.value, CourtesyConflictError)


def test_serialization_failure_detection() -> None:
    locked = OperationalError("INSERT INTO courtesies", {}, sqlite3.OperationalError("database is locked"))
    missing = OperationalError("SELECT 1", {}, sqlite3.OperationalError("no such table: events"))

    class PgSerializationError(Exception):
        sqlstate = "40001"

    class PgConnectionError(Exception):
        sqlstate = "08006"

    assert _is_serialization_failure(locked)
    assert not _is_serialization_failure(missing)
    assert _is_serialization_failure(OperationalError("UPDATE", {}, PgSerializationError()))
    assert not _is_serialization_failure(OperationalError("UPDATE", {}, PgConnectionError()))
