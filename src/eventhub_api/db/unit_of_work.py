"""Transactional boundary shared by the courtesy components."""

from __future__ import annotations

from types import TracebackType
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.base import ExecutableOption

from eventhub_api.db.base import Base
from eventhub_api.models.attendee import Attendee
from eventhub_api.models.courtesy import Courtesy
from eventhub_api.models.evaluation import BlockEnrollment, EvaluableBlock
from eventhub_api.models.event import Event
from eventhub_api.models.person import Person
from eventhub_api.models.registration import Registration
from eventhub_api.models.speaker import Speaker


ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Typed query helpers bound to the unit of work session."""

    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self._session = session
        self._model = model

    async def get(
        self,
        ident: Any,
        *,
        options: Sequence[ExecutableOption] = (),
    ) -> ModelT | None:
        stmt = select(self._model).where(self._model.id == ident).options(*options)  # type: ignore[attr-defined]
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_one(
        self,
        *criteria: ColumnElement[bool],
        options: Sequence[ExecutableOption] = (),
    ) -> ModelT | None:
        stmt = select(self._model).where(*criteria).options(*options).limit(1)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def find(
        self,
        *criteria: ColumnElement[bool],
        options: Sequence[ExecutableOption] = (),
        order_by: Sequence[Any] = (),
    ) -> list[ModelT]:
        stmt = select(self._model).where(*criteria).options(*options).order_by(*order_by)
        result = await self._session.execute(stmt)
        return list(result.scalars().unique().all())

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        stmt = select(exists().where(*criteria))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        return instance


class UnitOfWork:
    """One database transaction, opened at a pinned isolation level.

    Commits when the ``async with`` block exits cleanly and rolls back on any
    exception, so nothing written inside a failed block survives.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        isolation_level: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._isolation_level = isolation_level
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work has not been entered")
        return self._session

    async def __aenter__(self) -> "UnitOfWork":
        session = self._session_factory()
        if self._isolation_level:
            try:
                await session.connection(execution_options={"isolation_level": self._isolation_level})
            except Exception:
                await session.close()
                raise
        self._session = session
        self.events = Repository(session, Event)
        self.persons = Repository(session, Person)
        self.attendees = Repository(session, Attendee)
        self.speakers = Repository(session, Speaker)
        self.blocks = Repository(session, EvaluableBlock)
        self.registrations = Repository(session, Registration)
        self.enrollments = Repository(session, BlockEnrollment)
        self.courtesies = Repository(session, Courtesy)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if exc_type is None:
                await session.commit()
            else:
                await session.rollback()
        finally:
            await session.close()
            self._session = None

    async def flush(self) -> None:
        await self.session.flush()


__all__ = ["Repository", "UnitOfWork"]
