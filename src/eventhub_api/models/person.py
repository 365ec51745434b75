"""Canonical identity records shared by attendees, speakers and users."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID

from eventhub_api.db.base import Base


class DocumentType(str, Enum):
    DNI = "DNI"
    CE = "CE"
    PASSPORT = "PASSPORT"
    RUC = "RUC"
    OTHER = "OTHER"


class PersonStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MERGED = "MERGED"


class Person(Base):
    __tablename__ = "persons"
    __table_args__ = (
        UniqueConstraint("document_type", "document_number", name="uq_persons_document"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    document_type = Column(
        SqlEnum(DocumentType, name="document_type_enum"),
        nullable=False,
        default=DocumentType.DNI,
        server_default=DocumentType.DNI.value,
    )
    document_number = Column(String(32), nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    country = Column(String(64), nullable=True)
    status = Column(
        SqlEnum(PersonStatus, name="person_status_enum"),
        nullable=False,
        default=PersonStatus.ACTIVE,
        server_default=PersonStatus.ACTIVE.value,
    )
    flag_data_observed = Column(Boolean, nullable=False, default=False, server_default="false")
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
