from __future__ import annotations

import pytest
from sqlalchemy import select

from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.event import Event


class FailingConnectionSession:
    def __init__(self) -> None:
        self.closed = False

    async def connection(self, execution_options=None):
        raise ConnectionError("connection refused")

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_session_closed_when_isolation_pin_fails() -> None:
    sessions: list[FailingConnectionSession] = []

    def factory() -> FailingConnectionSession:
        session = FailingConnectionSession()
        sessions.append(session)
        return session

    uow = UnitOfWork(factory, isolation_level="SERIALIZABLE")

    with pytest.raises(ConnectionError):
        async with uow:
            pytest.fail("body must not run")

    assert [session.closed for session in sessions] == [True]
    with pytest.raises(RuntimeError):
        uow.session


@pytest.mark.asyncio
async def test_unit_of_work_rolls_back_on_error(session_factory, seed) -> None:
    event = await seed.event(title="Antes")

    with pytest.raises(ValueError):
        async with UnitOfWork(session_factory, isolation_level="SERIALIZABLE") as uow:
            stored = await uow.events.get(event.id)
            stored.title = "Después"
            await uow.flush()
            raise ValueError("abort")

    async with session_factory() as session:
        titles = (await session.execute(select(Event.title).where(Event.id == event.id))).scalars().all()
    assert titles == ["Antes"]
