from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Numeric,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from eventhub_api.db.base import Base


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    ATTENDED = "ATTENDED"


class RegistrationOrigin(str, Enum):
    """How the registration came to exist."""

    PURCHASE = "PURCHASE"
    COURTESY = "COURTESY"
    TRANSFER = "TRANSFER"


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    attendee_id = Column(UUID(as_uuid=True), ForeignKey("attendees.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_code = Column(String(64), nullable=False, unique=True)
    original_price = Column(Numeric(10, 2), nullable=False, server_default="0")
    discount_amount = Column(Numeric(10, 2), nullable=False, server_default="0")
    final_price = Column(Numeric(10, 2), nullable=False, server_default="0")
    status = Column(
        SqlEnum(RegistrationStatus, name="registration_status_enum"),
        nullable=False,
        default=RegistrationStatus.PENDING,
        server_default=RegistrationStatus.PENDING.value,
    )
    origin = Column(
        SqlEnum(RegistrationOrigin, name="registration_origin_enum"),
        nullable=False,
        default=RegistrationOrigin.PURCHASE,
        server_default=RegistrationOrigin.PURCHASE.value,
    )
    courtesy_id = Column(UUID(as_uuid=True), ForeignKey("courtesies.id", ondelete="SET NULL"), nullable=True, index=True)
    attended = Column(Boolean, nullable=False, default=False, server_default="false")
    attended_at = Column(DateTime(timezone=True), nullable=True)
    registered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    attendee = relationship("Attendee")
    event = relationship("Event")
    courtesy = relationship("Courtesy", back_populates="registration")
