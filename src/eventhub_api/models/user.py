from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID

from eventhub_api.db.base import Base


class UserRoleEnum(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ORG_ADMIN = "ORG_ADMIN"
    STAFF = "STAFF"
    ATTENDEE = "ATTENDEE"


class UserStatusEnum(str, Enum):
    ACTIVE = "ACTIVE"
    INVITED = "INVITED"
    SUSPENDED = "SUSPENDED"


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=True)
    role = Column(String(length=16), nullable=False, default=UserRoleEnum.ATTENDEE.value, server_default=UserRoleEnum.ATTENDEE.value)
    status = Column(String(length=16), nullable=False, default=UserStatusEnum.ACTIVE.value, server_default=UserStatusEnum.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
