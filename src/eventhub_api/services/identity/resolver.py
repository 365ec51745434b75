"""Person lookup-or-create used by grants and speaker batches."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub_api.models.person import DocumentType, Person, PersonStatus
from eventhub_api.services.identity.errors import (
    PersonConflictError,
    PersonNotFoundError,
    PersonRequiredError,
)


@dataclass(frozen=True)
class PersonData:
    """Raw identity fields supplied when the caller has no person id."""

    first_name: str
    last_name: str
    email: str
    document_number: str
    document_type: DocumentType = DocumentType.DNI
    phone: str | None = None
    country: str | None = None

    @property
    def normalized_email(self) -> str:
        return self.email.strip().lower()


class IdentityResolver:
    """Resolve a person reference against the ``persons`` table.

    Runs on the caller's session so a person created during a grant is rolled
    back together with the rest of the grant.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, person_id: UUID) -> Person:
        person = await self._session.get(Person, person_id)
        if person is None or person.status != PersonStatus.ACTIVE:
            raise PersonNotFoundError(person_id=str(person_id))
        return person

    async def find_by_email(self, email: str) -> Person | None:
        stmt = (
            select(Person)
            .where(
                func.lower(Person.email) == email.strip().lower(),
                Person.status == PersonStatus.ACTIVE,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def find_by_document(self, document_type: DocumentType, document_number: str) -> Person | None:
        stmt = select(Person).where(
            Person.document_type == document_type,
            Person.document_number == document_number.strip(),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_or_create(self, data: PersonData) -> Person:
        """Match by document first, then by email, else create a new person.

        An email match with a different document is returned as-is but flagged
        with ``flag_data_observed`` for manual review.
        """

        person = await self.find_by_document(data.document_type, data.document_number)
        if person is not None:
            return person

        person = await self.find_by_email(data.email)
        if person is not None:
            if (
                person.document_type != data.document_type
                or person.document_number != data.document_number.strip()
            ):
                person.flag_data_observed = True
                logger.warning(
                    "Person matched by email with a different document",
                    person_id=str(person.id),
                )
            return person

        return await self.create(data)

    async def create(self, data: PersonData) -> Person:
        if await self.find_by_document(data.document_type, data.document_number) is not None:
            raise PersonConflictError("courtesies.person_document_taken")
        if await self.find_by_email(data.email) is not None:
            raise PersonConflictError("courtesies.person_email_taken")

        person = Person(
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=data.normalized_email,
            document_type=data.document_type,
            document_number=data.document_number.strip(),
            phone=data.phone,
            country=data.country,
            status=PersonStatus.ACTIVE,
        )
        self._session.add(person)
        await self._session.flush()
        logger.info("Person created", person_id=str(person.id))
        return person

    async def resolve(
        self,
        *,
        person_id: UUID | None = None,
        person_data: PersonData | None = None,
    ) -> Person:
        if person_id is not None:
            return await self.find_by_id(person_id)
        if person_data is not None:
            return await self.find_or_create(person_data)
        raise PersonRequiredError()


__all__ = ["IdentityResolver", "PersonData"]
