"""Courtesy (complimentary access) service exports."""

from .errors import (  # noqa: F401
    BlocksRequiredError,
    CourtesyAlreadyGrantedError,
    CourtesyConflictError,
    CourtesyError,
    CourtesyNotActiveError,
    CourtesyRecordNotFoundError,
    EventCancelledError,
    EventHasNoSpeakersError,
    EventNotFoundError,
    GrantSerializationError,
    InvalidBlocksError,
    SpeakerNotFoundError,
)
from .requests import CancelRequest, GrantRequest  # noqa: F401
from .service import CourtesyService  # noqa: F401
from .speakers import SpeakerGrantReport  # noqa: F401
from .stats import CourtesyStats  # noqa: F401
