"""Courtesy service facade used by the HTTP layer and background jobs."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhub_api.core.messages import MessageLocalizer, get_localizer
from eventhub_api.core.settings import settings
from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.courtesy import Courtesy, CourtesyScope
from eventhub_api.models.user import User
from eventhub_api.observability.courtesies import CourtesyAuditTrail
from eventhub_api.observability.tracing import get_tracer
from eventhub_api.services.courtesies.allocator import CourtesyAllocator
from eventhub_api.services.courtesies.compensator import CancellationCompensator
from eventhub_api.services.courtesies.errors import (
    CourtesyRecordNotFoundError,
    GrantSerializationError,
)
from eventhub_api.services.courtesies.loading import COURTESY_DETAIL_OPTIONS
from eventhub_api.services.courtesies.requests import CancelRequest, GrantRequest
from eventhub_api.services.courtesies.speakers import SpeakerCourtesyOrchestrator, SpeakerGrantReport
from eventhub_api.services.courtesies.stats import CourtesyStats, CourtesyStatsAggregator
from eventhub_api.services.notifications.dispatcher import (
    DispatchResult,
    NotificationDispatcher,
    build_notification_dispatcher,
)

_tracer = get_tracer(__name__)

# SQLSTATEs PostgreSQL raises when a serializable transaction must be retried.
_SERIALIZATION_SQLSTATES = {"40001", "40P01"}

# SQLite reports a lost write race as a busy or locked database.
_SQLITE_CONTENTION_ERRORS = ("SQLITE_BUSY", "SQLITE_LOCKED")


def _is_serialization_failure(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _SERIALIZATION_SQLSTATES:
        return True
    if not isinstance(exc, OperationalError):
        return False
    errorname = getattr(orig, "sqlite_errorname", None) or ""
    if errorname.startswith(_SQLITE_CONTENTION_ERRORS):
        return True
    message = str(orig).lower()
    return "database is locked" in message or "database table is locked" in message


class CourtesyService:
    """Grant, cancel and query courtesies.

    Grants and cancellations each run in one unit of work at the configured
    isolation level. A lost serialization race is reported as a conflict and
    is never retried here.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        dispatcher: NotificationDispatcher | None = None,
        localizer: MessageLocalizer | None = None,
        audit: CourtesyAuditTrail | None = None,
        isolation_level: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher or build_notification_dispatcher()
        self._localizer = localizer or get_localizer()
        self._audit = audit or CourtesyAuditTrail("courtesies")
        self._isolation_level = isolation_level or settings.courtesy_transaction_isolation

    def _unit_of_work(self) -> UnitOfWork:
        return UnitOfWork(self._session_factory, isolation_level=self._isolation_level)

    async def grant(self, request: GrantRequest, grantor: User) -> Courtesy:
        with _tracer.start_as_current_span("courtesies.grant") as span:
            span.set_attribute("courtesy.event_id", str(request.event_id))
            span.set_attribute("courtesy.scope", request.scope.value)
            try:
                async with self._unit_of_work() as uow:
                    outcome = await CourtesyAllocator(uow, self._audit.child("courtesies.allocator")).grant(
                        request, grantor
                    )
            except IntegrityError as exc:
                self._audit.grant_rejected(reason="concurrent_update", event_id=request.event_id)
                raise GrantSerializationError(event_id=str(request.event_id)) from exc
            except DBAPIError as exc:
                if not _is_serialization_failure(exc):
                    raise
                self._audit.grant_rejected(reason="serialization_failure", event_id=request.event_id)
                raise GrantSerializationError(event_id=str(request.event_id)) from exc

            courtesy = outcome.courtesy
            span.set_attribute("courtesy.id", str(courtesy.id))

        self._audit.granted(
            courtesy_id=courtesy.id,
            event_id=courtesy.event_id,
            person_id=courtesy.person_id,
            scope=courtesy.scope.value,
        )
        try:
            result = await self._dispatcher.courtesy_granted(courtesy.id)
        except Exception as exc:  # noqa: BLE001 - the grant is already committed
            result = DispatchResult(status="failed", detail=repr(exc))
        self._audit.notification(result.status, courtesy_id=courtesy.id, detail=result.detail)
        return courtesy

    async def cancel(self, courtesy_id: UUID, request: CancelRequest, canceller: User) -> Courtesy:
        with _tracer.start_as_current_span("courtesies.cancel") as span:
            span.set_attribute("courtesy.id", str(courtesy_id))
            try:
                async with self._unit_of_work() as uow:
                    compensator = CancellationCompensator(uow, self._audit.child("courtesies.compensator"))
                    return await compensator.cancel(courtesy_id, request.reason, canceller)
            except DBAPIError as exc:
                if not _is_serialization_failure(exc):
                    raise
                self._audit.cancel_rejected(reason="serialization_failure", courtesy_id=courtesy_id)
                raise GrantSerializationError(courtesy_id=str(courtesy_id)) from exc

    async def find_by_event(self, event_id: UUID) -> list[Courtesy]:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.courtesies.find(
                Courtesy.event_id == event_id,
                options=COURTESY_DETAIL_OPTIONS,
                order_by=(Courtesy.granted_at.desc(), Courtesy.created_at.desc()),
            )

    async def find_by_person(self, person_id: UUID) -> list[Courtesy]:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.courtesies.find(
                Courtesy.person_id == person_id,
                options=COURTESY_DETAIL_OPTIONS,
                order_by=(Courtesy.granted_at.desc(), Courtesy.created_at.desc()),
            )

    async def find_one(self, courtesy_id: UUID) -> Courtesy:
        async with UnitOfWork(self._session_factory) as uow:
            courtesy = await uow.courtesies.get(courtesy_id, options=COURTESY_DETAIL_OPTIONS)
        if courtesy is None:
            raise CourtesyRecordNotFoundError(courtesy_id=str(courtesy_id))
        return courtesy

    async def grant_speaker_courtesies_report(
        self,
        event_id: UUID,
        scope: CourtesyScope,
        grantor: User,
        *,
        locale: str | None = None,
    ) -> SpeakerGrantReport:
        orchestrator = SpeakerCourtesyOrchestrator(
            self._session_factory,
            self.grant,
            self._audit.child("courtesies.speakers", event_id=str(event_id)),
            localizer=self._localizer,
            placeholder_prefix=settings.speaker_placeholder_document_prefix,
            isolation_level=self._isolation_level,
        )
        return await orchestrator.grant_all(event_id, scope, grantor, locale=locale)

    async def grant_speaker_courtesies(
        self,
        event_id: UUID,
        scope: CourtesyScope,
        grantor: User,
        *,
        locale: str | None = None,
    ) -> list[Courtesy]:
        report = await self.grant_speaker_courtesies_report(event_id, scope, grantor, locale=locale)
        return report.created

    async def get_event_stats(self, event_id: UUID) -> CourtesyStats:
        async with UnitOfWork(self._session_factory) as uow:
            return await CourtesyStatsAggregator(uow.session).collect(event_id)


__all__ = ["CourtesyService"]
