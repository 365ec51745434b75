"""Zero-price access records created for a fresh courtesy."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.attendee import Attendee
from eventhub_api.models.courtesy import Courtesy, CourtesyScope
from eventhub_api.models.evaluation import BlockEnrollment, BlockEnrollmentStatus
from eventhub_api.models.event import Event
from eventhub_api.models.registration import Registration, RegistrationOrigin, RegistrationStatus
from eventhub_api.observability.courtesies import CourtesyAuditTrail

ZERO = Decimal("0")

# Statuses that already give the attendee access; a second record is never created.
OPEN_REGISTRATION_STATUSES = (RegistrationStatus.CONFIRMED, RegistrationStatus.PENDING)
OPEN_ENROLLMENT_STATUSES = (
    BlockEnrollmentStatus.ENROLLED,
    BlockEnrollmentStatus.PENDING,
    BlockEnrollmentStatus.IN_PROGRESS,
)


@dataclass
class ProvisioningReport:
    registrations_created: list[UUID] = field(default_factory=list)
    registrations_skipped: list[UUID] = field(default_factory=list)
    enrollments_created: list[UUID] = field(default_factory=list)
    enrollments_skipped: list[UUID] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.registrations_created) + len(self.enrollments_created)


class AccessProvisioner:
    """Create the registration or block enrollments a courtesy grants.

    Runs inside the grant's unit of work. Existing open access is skipped and
    logged, never treated as a failure.
    """

    def __init__(self, uow: UnitOfWork, audit: CourtesyAuditTrail) -> None:
        self._uow = uow
        self._audit = audit

    async def provision(self, courtesy: Courtesy, attendee: Attendee, event: Event) -> ProvisioningReport:
        report = ProvisioningReport()
        if courtesy.scope == CourtesyScope.FULL_EVENT:
            await self._provision_registration(courtesy, attendee, event, report)
        elif courtesy.scope == CourtesyScope.SPECIFIC_BLOCKS:
            await self._provision_enrollments(courtesy, attendee, report)
        # ASSIGNED_SESSIONS_ONLY access follows the speaker's session assignment.
        await self._uow.flush()
        return report

    async def _provision_registration(
        self,
        courtesy: Courtesy,
        attendee: Attendee,
        event: Event,
        report: ProvisioningReport,
    ) -> None:
        existing = await self._uow.registrations.find_one(
            Registration.attendee_id == attendee.id,
            Registration.event_id == event.id,
            Registration.status.in_(OPEN_REGISTRATION_STATUSES),
        )
        if existing is not None:
            report.registrations_skipped.append(existing.id)
            self._audit.provisioning_skipped(
                record="registration", existing_id=existing.id, courtesy_id=courtesy.id
            )
            return

        registration = self._uow.registrations.add(
            Registration(
                id=uuid4(),
                attendee_id=attendee.id,
                event_id=event.id,
                ticket_code=str(uuid4()),
                original_price=ZERO,
                discount_amount=ZERO,
                final_price=ZERO,
                status=RegistrationStatus.CONFIRMED,
                origin=RegistrationOrigin.COURTESY,
                courtesy_id=courtesy.id,
                attended=False,
            )
        )
        report.registrations_created.append(registration.id)
        self._audit.provisioned(record="registration", record_id=registration.id, courtesy_id=courtesy.id)

    async def _provision_enrollments(
        self,
        courtesy: Courtesy,
        attendee: Attendee,
        report: ProvisioningReport,
    ) -> None:
        enrolled_at = datetime.now(timezone.utc)
        for block in courtesy.specific_blocks:
            existing = await self._uow.enrollments.find_one(
                BlockEnrollment.attendee_id == attendee.id,
                BlockEnrollment.block_id == block.id,
                BlockEnrollment.status.in_(OPEN_ENROLLMENT_STATUSES),
            )
            if existing is not None:
                report.enrollments_skipped.append(existing.id)
                self._audit.provisioning_skipped(
                    record="block_enrollment", existing_id=existing.id, courtesy_id=courtesy.id
                )
                continue

            enrollment = self._uow.enrollments.add(
                BlockEnrollment(
                    id=uuid4(),
                    block_id=block.id,
                    attendee_id=attendee.id,
                    courtesy_id=courtesy.id,
                    status=BlockEnrollmentStatus.ENROLLED,
                    original_price=ZERO,
                    discount_amount=ZERO,
                    final_price=ZERO,
                    attendance_percentage=ZERO,
                    sessions_attended=0,
                    total_sessions=len(block.sessions),
                    meets_attendance_requirement=False,
                    passed=False,
                    retake_attempts_used=0,
                    enrolled_at=enrolled_at,
                )
            )
            report.enrollments_created.append(enrollment.id)
            self._audit.provisioned(record="block_enrollment", record_id=enrollment.id, courtesy_id=courtesy.id)


__all__ = ["AccessProvisioner", "ProvisioningReport"]
