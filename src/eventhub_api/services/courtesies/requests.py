from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from eventhub_api.models.courtesy import CourtesyScope, CourtesyType
from eventhub_api.services.identity.resolver import PersonData


@dataclass(frozen=True)
class GrantRequest:
    """Input for a single courtesy grant.

    ``person_id`` wins when both it and ``person_data`` are set.
    """

    event_id: UUID
    type: CourtesyType
    scope: CourtesyScope
    person_id: UUID | None = None
    person_data: PersonData | None = None
    specific_block_ids: tuple[UUID, ...] = field(default_factory=tuple)
    speaker_id: UUID | None = None
    reason: str | None = None
    notes: str | None = None
    valid_until: datetime | None = None


@dataclass(frozen=True)
class CancelRequest:
    reason: str


__all__ = ["CancelRequest", "GrantRequest"]
