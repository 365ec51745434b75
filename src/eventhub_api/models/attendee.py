from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum as SqlEnum, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from eventhub_api.db.base import Base
from eventhub_api.models.person import DocumentType


class Attendee(Base):
    """Identity used by registrations and block enrollments."""

    __tablename__ = "attendees"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    email = Column(String, nullable=False, index=True)
    document_type = Column(
        SqlEnum(DocumentType, name="document_type_enum"),
        nullable=False,
        default=DocumentType.DNI,
        server_default=DocumentType.DNI.value,
    )
    document_number = Column(String(32), nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    person_id = Column(UUID(as_uuid=True), ForeignKey("persons.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    person = relationship("Person")
