"""SQLAlchemy models package."""

# Import all models
from .user import User, UserRoleEnum, UserStatusEnum  # noqa: F401
from .event import Event, EventSession, EventStatus, event_speakers  # noqa: F401
from .speaker import Speaker  # noqa: F401
from .person import DocumentType, Person, PersonStatus  # noqa: F401
from .attendee import Attendee  # noqa: F401
from .evaluation import (  # noqa: F401
    BlockEnrollment,
    BlockEnrollmentStatus,
    BlockStatus,
    BlockType,
    EvaluableBlock,
    block_sessions,
)
from .courtesy import (  # noqa: F401
    OPEN_COURTESY_STATUSES,
    Courtesy,
    CourtesyScope,
    CourtesyStatus,
    CourtesyType,
    courtesy_blocks,
)
from .registration import Registration, RegistrationOrigin, RegistrationStatus  # noqa: F401
