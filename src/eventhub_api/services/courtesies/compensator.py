from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.courtesy import Courtesy, CourtesyStatus
from eventhub_api.models.evaluation import BlockEnrollment, BlockEnrollmentStatus
from eventhub_api.models.registration import RegistrationStatus
from eventhub_api.models.user import User
from eventhub_api.observability.courtesies import CourtesyAuditTrail
from eventhub_api.services.courtesies.errors import CourtesyNotActiveError, CourtesyRecordNotFoundError
from eventhub_api.services.courtesies.lifecycle import (
    COURTESY_LIFECYCLE,
    ENROLLMENT_LIFECYCLE,
    REGISTRATION_LIFECYCLE,
)
from eventhub_api.services.courtesies.loading import COURTESY_DETAIL_OPTIONS, reload_courtesy


class CancellationCompensator:
    """Cancel an active courtesy and the access records it provisioned."""

    def __init__(self, uow: UnitOfWork, audit: CourtesyAuditTrail) -> None:
        self._uow = uow
        self._audit = audit

    async def cancel(self, courtesy_id: UUID, reason: str, canceller: User) -> Courtesy:
        courtesy = await self._uow.courtesies.get(courtesy_id, options=COURTESY_DETAIL_OPTIONS)
        if courtesy is None:
            raise CourtesyRecordNotFoundError(courtesy_id=str(courtesy_id))

        try:
            COURTESY_LIFECYCLE.ensure(courtesy.status, CourtesyStatus.CANCELLED)
        except CourtesyNotActiveError:
            self._audit.cancel_rejected(reason=courtesy.status.value.lower(), courtesy_id=courtesy.id)
            raise

        registrations_cancelled = 0
        registration = courtesy.registration
        if registration is not None and registration.status != RegistrationStatus.CANCELLED:
            REGISTRATION_LIFECYCLE.transition(registration, RegistrationStatus.CANCELLED)
            registrations_cancelled += 1

        enrollments_cancelled = 0
        block_ids = [block.id for block in courtesy.specific_blocks]
        if block_ids and courtesy.attendee_id is not None:
            enrollments = await self._uow.enrollments.find(
                BlockEnrollment.attendee_id == courtesy.attendee_id,
                BlockEnrollment.block_id.in_(block_ids),
                BlockEnrollment.status != BlockEnrollmentStatus.CANCELLED,
            )
            for enrollment in enrollments:
                ENROLLMENT_LIFECYCLE.transition(enrollment, BlockEnrollmentStatus.CANCELLED)
                enrollments_cancelled += 1

        COURTESY_LIFECYCLE.transition(courtesy, CourtesyStatus.CANCELLED)
        courtesy.cancelled_by_id = canceller.id
        courtesy.cancelled_at = datetime.now(timezone.utc)
        courtesy.cancellation_reason = reason
        await self._uow.flush()

        self._audit.cancelled(
            courtesy_id=courtesy.id,
            registrations=registrations_cancelled,
            enrollments=enrollments_cancelled,
        )
        return await reload_courtesy(self._uow.session, courtesy.id)


__all__ = ["CancellationCompensator"]
