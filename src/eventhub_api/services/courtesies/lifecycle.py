"""Status transition tables for courtesies and the access records they own."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

from eventhub_api.models.courtesy import CourtesyStatus
from eventhub_api.models.evaluation import BlockEnrollmentStatus
from eventhub_api.models.registration import RegistrationStatus
from eventhub_api.services.courtesies.errors import (
    CourtesyConflictError,
    CourtesyNotActiveError,
    InvalidStatusTransitionError,
)

StatusT = TypeVar("StatusT", bound=Enum)


class StatusLifecycle(Generic[StatusT]):
    """Apply status changes only along the declared transitions.

    Anything not listed is rejected, including a transition to the current
    status.
    """

    def __init__(
        self,
        name: str,
        allowed: Mapping[StatusT, frozenset[StatusT]],
        *,
        error: type[CourtesyConflictError] = InvalidStatusTransitionError,
    ) -> None:
        self.name = name
        self._allowed = allowed
        self._error = error

    def can_transition(self, current: StatusT, target: StatusT) -> bool:
        return target in self._allowed.get(current, frozenset())

    def ensure(self, current: StatusT, target: StatusT) -> None:
        if not self.can_transition(current, target):
            raise self._error(
                entity=self.name,
                from_status=current.value,
                to_status=target.value,
            )

    def transition(self, record: Any, target: StatusT) -> StatusT:
        """Set ``record.status`` to ``target`` and return the previous status."""

        current = record.status
        self.ensure(current, target)
        record.status = target
        return current


COURTESY_LIFECYCLE: StatusLifecycle[CourtesyStatus] = StatusLifecycle(
    "courtesy",
    {
        CourtesyStatus.ACTIVE: frozenset(
            {CourtesyStatus.USED, CourtesyStatus.CANCELLED, CourtesyStatus.EXPIRED}
        ),
        CourtesyStatus.USED: frozenset(),
        CourtesyStatus.CANCELLED: frozenset(),
        CourtesyStatus.EXPIRED: frozenset(),
    },
    error=CourtesyNotActiveError,
)

REGISTRATION_LIFECYCLE: StatusLifecycle[RegistrationStatus] = StatusLifecycle(
    "registration",
    {
        RegistrationStatus.PENDING: frozenset(
            {RegistrationStatus.CONFIRMED, RegistrationStatus.CANCELLED}
        ),
        RegistrationStatus.CONFIRMED: frozenset(
            {RegistrationStatus.ATTENDED, RegistrationStatus.CANCELLED}
        ),
        RegistrationStatus.ATTENDED: frozenset({RegistrationStatus.CANCELLED}),
        RegistrationStatus.CANCELLED: frozenset(),
    },
)

ENROLLMENT_LIFECYCLE: StatusLifecycle[BlockEnrollmentStatus] = StatusLifecycle(
    "block_enrollment",
    {
        BlockEnrollmentStatus.PENDING: frozenset(
            {
                BlockEnrollmentStatus.ENROLLED,
                BlockEnrollmentStatus.WITHDRAWN,
                BlockEnrollmentStatus.CANCELLED,
            }
        ),
        BlockEnrollmentStatus.ENROLLED: frozenset(
            {
                BlockEnrollmentStatus.IN_PROGRESS,
                BlockEnrollmentStatus.WITHDRAWN,
                BlockEnrollmentStatus.CANCELLED,
            }
        ),
        BlockEnrollmentStatus.IN_PROGRESS: frozenset(
            {
                BlockEnrollmentStatus.APPROVED,
                BlockEnrollmentStatus.FAILED,
                BlockEnrollmentStatus.WITHDRAWN,
                BlockEnrollmentStatus.CANCELLED,
            }
        ),
        BlockEnrollmentStatus.APPROVED: frozenset({BlockEnrollmentStatus.CANCELLED}),
        BlockEnrollmentStatus.FAILED: frozenset({BlockEnrollmentStatus.CANCELLED}),
        BlockEnrollmentStatus.WITHDRAWN: frozenset({BlockEnrollmentStatus.CANCELLED}),
        BlockEnrollmentStatus.CANCELLED: frozenset(),
    },
)


__all__ = [
    "COURTESY_LIFECYCLE",
    "ENROLLMENT_LIFECYCLE",
    "REGISTRATION_LIFECYCLE",
    "StatusLifecycle",
]
