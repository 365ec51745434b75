import sys
from decimal import Decimal
from pathlib import Path
from typing import Sequence

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


def _configure_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    if src_path.exists():
        sys.path.insert(0, str(src_path))


_configure_path()

from eventhub_api import models  # noqa: E402,F401  # register every table on the metadata
from eventhub_api.app import create_app  # noqa: E402
from eventhub_api.db.base import Base  # noqa: E402
from eventhub_api.db.session import get_session, get_session_factory  # noqa: E402
from eventhub_api.models.attendee import Attendee  # noqa: E402
from eventhub_api.models.evaluation import BlockStatus, EvaluableBlock  # noqa: E402
from eventhub_api.models.event import Event, EventSession, EventStatus, event_speakers  # noqa: E402
from eventhub_api.models.person import DocumentType, Person  # noqa: E402
from eventhub_api.models.speaker import Speaker  # noqa: E402
from eventhub_api.models.user import User, UserRoleEnum, UserStatusEnum  # noqa: E402


async def _build_factory(url: str):
    engine = create_async_engine(url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine, async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session_factory():
    engine, factory = await _build_factory("sqlite+aiosqlite:///:memory:")

    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """File-backed database so concurrent units of work get separate connections."""

    engine, factory = await _build_factory(f"sqlite+aiosqlite:///{tmp_path / 'courtesies.db'}")

    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def app_with_db(session_factory):
    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    try:
        yield app, session_factory
    finally:
        app.dependency_overrides.clear()


class Seeder:
    """Insert fixture rows, one committed session per call."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory

    async def user(
        self,
        *,
        email: str = "admin@example.com",
        role: UserRoleEnum = UserRoleEnum.ORG_ADMIN,
        status: UserStatusEnum = UserStatusEnum.ACTIVE,
    ) -> User:
        async with self._factory() as session:
            user = User(email=email, display_name=email.split("@")[0], role=role.value, status=status.value)
            session.add(user)
            await session.commit()
            return user

    async def event(
        self,
        *,
        title: str = "Congreso de Ingeniería 2026",
        status: EventStatus = EventStatus.PUBLISHED,
        is_active: bool = True,
    ) -> Event:
        async with self._factory() as session:
            event = Event(title=title, status=status, is_active=is_active)
            session.add(event)
            await session.commit()
            return event

    async def block(
        self,
        event: Event,
        *,
        name: str = "Taller de Python",
        is_active: bool = True,
        session_count: int = 2,
    ) -> EvaluableBlock:
        async with self._factory() as session:
            sessions = [
                EventSession(event_id=event.id, title=f"{name} - sesión {index + 1}")
                for index in range(session_count)
            ]
            block = EvaluableBlock(
                event_id=event.id,
                name=name,
                status=BlockStatus.PUBLISHED,
                price=Decimal("150.00"),
                is_active=is_active,
            )
            block.sessions = sessions
            session.add_all([*sessions, block])
            await session.commit()
            return block

    async def person(
        self,
        *,
        first_name: str = "Lucía",
        last_name: str = "Quispe",
        email: str = "lucia.quispe@example.com",
        document_number: str = "45879632",
        document_type: DocumentType = DocumentType.DNI,
    ) -> Person:
        async with self._factory() as session:
            person = Person(
                first_name=first_name,
                last_name=last_name,
                email=email,
                document_type=document_type,
                document_number=document_number,
            )
            session.add(person)
            await session.commit()
            return person

    async def attendee(self, person: Person) -> Attendee:
        async with self._factory() as session:
            attendee = Attendee(
                first_name=person.first_name,
                last_name=person.last_name,
                email=person.email,
                document_type=person.document_type,
                document_number=person.document_number,
                person_id=person.id,
            )
            session.add(attendee)
            await session.commit()
            return attendee

    async def speakers(self, event: Event, names: Sequence[tuple[str, str]]) -> list[Speaker]:
        async with self._factory() as session:
            speakers = [
                Speaker(
                    first_name=first_name,
                    last_name=last_name,
                    email=f"{first_name}.{last_name}@speakers.example.com".lower(),
                )
                for first_name, last_name in names
            ]
            session.add_all(speakers)
            await session.flush()
            await session.execute(
                event_speakers.insert(),
                [{"event_id": event.id, "speaker_id": speaker.id} for speaker in speakers],
            )
            await session.commit()
            return speakers


@pytest_asyncio.fixture
async def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest_asyncio.fixture
async def file_seed(file_session_factory) -> Seeder:
    return Seeder(file_session_factory)
