from __future__ import annotations

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub_api.models.attendee import Attendee
from eventhub_api.models.person import Person


class AttendeeMaterializer:
    """Find or create the attendee record access records hang off."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def materialize(self, person: Person) -> Attendee:
        """Reuse an attendee matched by email or document number, else mirror the person.

        A matched attendee is never modified, even when its fields differ from
        the person's.
        """

        stmt = (
            select(Attendee)
            .where(
                or_(
                    func.lower(Attendee.email) == person.email.lower(),
                    Attendee.document_number == person.document_number,
                )
            )
            .order_by(Attendee.created_at)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        attendee = result.scalars().first()
        if attendee is not None:
            return attendee

        attendee = Attendee(
            first_name=person.first_name,
            last_name=person.last_name,
            email=person.email,
            document_type=person.document_type,
            document_number=person.document_number,
            phone=person.phone,
            person_id=person.id,
        )
        self._session.add(attendee)
        await self._session.flush()
        logger.info("Attendee materialized", attendee_id=str(attendee.id), person_id=str(person.id))
        return attendee


__all__ = ["AttendeeMaterializer"]
