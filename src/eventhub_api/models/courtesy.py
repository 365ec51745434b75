"""Complimentary access grants and their block scoping."""

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from eventhub_api.db.base import Base


class CourtesyType(str, Enum):
    SPEAKER = "SPEAKER"
    VIP = "VIP"
    PRESS = "PRESS"
    SPONSOR = "SPONSOR"
    STAFF = "STAFF"
    OTHER = "OTHER"


class CourtesyScope(str, Enum):
    FULL_EVENT = "FULL_EVENT"
    SPECIFIC_BLOCKS = "SPECIFIC_BLOCKS"
    ASSIGNED_SESSIONS_ONLY = "ASSIGNED_SESSIONS_ONLY"


class CourtesyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


# Statuses that occupy the single open slot per (event, person).
OPEN_COURTESY_STATUSES = (CourtesyStatus.ACTIVE, CourtesyStatus.USED)

_OPEN_STATUS_PREDICATE = text("status IN ('ACTIVE', 'USED')")


courtesy_blocks = Table(
    "courtesy_blocks",
    Base.metadata,
    Column("courtesy_id", UUID(as_uuid=True), ForeignKey("courtesies.id", ondelete="CASCADE"), primary_key=True),
    Column("block_id", UUID(as_uuid=True), ForeignKey("evaluable_blocks.id", ondelete="CASCADE"), primary_key=True),
)


class Courtesy(Base):
    __tablename__ = "courtesies"
    __table_args__ = (
        Index(
            "uq_courtesies_event_person_open",
            "event_id",
            "person_id",
            unique=True,
            postgresql_where=_OPEN_STATUS_PREDICATE,
            sqlite_where=_OPEN_STATUS_PREDICATE,
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    person_id = Column(UUID(as_uuid=True), ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True)
    attendee_id = Column(UUID(as_uuid=True), ForeignKey("attendees.id", ondelete="SET NULL"), nullable=True)
    speaker_id = Column(UUID(as_uuid=True), ForeignKey("speakers.id", ondelete="SET NULL"), nullable=True)
    type = Column(
        SqlEnum(CourtesyType, name="courtesy_type_enum"),
        nullable=False,
        default=CourtesyType.OTHER,
        server_default=CourtesyType.OTHER.value,
    )
    scope = Column(
        SqlEnum(CourtesyScope, name="courtesy_scope_enum"),
        nullable=False,
        default=CourtesyScope.FULL_EVENT,
        server_default=CourtesyScope.FULL_EVENT.value,
    )
    status = Column(
        SqlEnum(CourtesyStatus, name="courtesy_status_enum"),
        nullable=False,
        default=CourtesyStatus.ACTIVE,
        server_default=CourtesyStatus.ACTIVE.value,
    )
    granted_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    granted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    cancelled_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    event = relationship("Event")
    person = relationship("Person")
    attendee = relationship("Attendee")
    speaker = relationship("Speaker")
    granted_by = relationship("User", foreign_keys=[granted_by_id])
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])
    specific_blocks = relationship("EvaluableBlock", secondary=courtesy_blocks, order_by="EvaluableBlock.name")
    registration = relationship("Registration", back_populates="courtesy", uselist=False)
    block_enrollments = relationship("BlockEnrollment", back_populates="courtesy")
