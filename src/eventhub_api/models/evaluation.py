"""Evaluable blocks (workshops, modules) and the enrollments against them."""

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from eventhub_api.db.base import Base


class BlockType(str, Enum):
    WORKSHOP = "WORKSHOP"
    MODULE = "MODULE"
    COURSE = "COURSE"
    OTHER = "OTHER"


class BlockStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BlockEnrollmentStatus(str, Enum):
    PENDING = "PENDING"
    ENROLLED = "ENROLLED"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    FAILED = "FAILED"
    WITHDRAWN = "WITHDRAWN"
    CANCELLED = "CANCELLED"


block_sessions = Table(
    "block_sessions",
    Base.metadata,
    Column("block_id", UUID(as_uuid=True), ForeignKey("evaluable_blocks.id", ondelete="CASCADE"), primary_key=True),
    Column("session_id", UUID(as_uuid=True), ForeignKey("event_sessions.id", ondelete="CASCADE"), primary_key=True),
)


class EvaluableBlock(Base):
    __tablename__ = "evaluable_blocks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(
        SqlEnum(BlockType, name="block_type_enum"),
        nullable=False,
        default=BlockType.WORKSHOP,
        server_default=BlockType.WORKSHOP.value,
    )
    status = Column(
        SqlEnum(BlockStatus, name="block_status_enum"),
        nullable=False,
        default=BlockStatus.DRAFT,
        server_default=BlockStatus.DRAFT.value,
    )
    price = Column(Numeric(10, 2), nullable=False, server_default="0")
    min_attendance_percentage = Column(Integer, nullable=False, default=80, server_default="80")
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    event = relationship("Event", back_populates="blocks")
    sessions = relationship("EventSession", secondary=block_sessions)


class BlockEnrollment(Base):
    __tablename__ = "block_enrollments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    block_id = Column(UUID(as_uuid=True), ForeignKey("evaluable_blocks.id", ondelete="CASCADE"), nullable=False, index=True)
    attendee_id = Column(UUID(as_uuid=True), ForeignKey("attendees.id", ondelete="CASCADE"), nullable=False, index=True)
    courtesy_id = Column(UUID(as_uuid=True), ForeignKey("courtesies.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        SqlEnum(BlockEnrollmentStatus, name="block_enrollment_status_enum"),
        nullable=False,
        default=BlockEnrollmentStatus.PENDING,
        server_default=BlockEnrollmentStatus.PENDING.value,
    )
    original_price = Column(Numeric(10, 2), nullable=False, server_default="0")
    discount_amount = Column(Numeric(10, 2), nullable=False, server_default="0")
    final_price = Column(Numeric(10, 2), nullable=False, server_default="0")
    attendance_percentage = Column(Numeric(5, 2), nullable=False, default=0, server_default="0")
    sessions_attended = Column(Integer, nullable=False, default=0, server_default="0")
    total_sessions = Column(Integer, nullable=False, default=0, server_default="0")
    meets_attendance_requirement = Column(Boolean, nullable=False, default=False, server_default="false")
    passed = Column(Boolean, nullable=True)
    retake_attempts_used = Column(Integer, nullable=False, default=0, server_default="0")
    enrolled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    block = relationship("EvaluableBlock")
    attendee = relationship("Attendee")
    courtesy = relationship("Courtesy", back_populates="block_enrollments")
