"""Courtesy engine errors, one class per violated rule."""

from eventhub_api.core.errors import DomainError, ErrorKind


class CourtesyError(DomainError):
    """Base exception for courtesy grant and cancellation failures."""


class CourtesyNotFoundError(CourtesyError):
    kind = ErrorKind.NOT_FOUND


class CourtesyConflictError(CourtesyError):
    kind = ErrorKind.CONFLICT


class CourtesyInvalidRequestError(CourtesyError):
    kind = ErrorKind.INVALID_REQUEST


class EventNotFoundError(CourtesyNotFoundError):
    message_key = "courtesies.event_not_found"


class SpeakerNotFoundError(CourtesyNotFoundError):
    message_key = "courtesies.speaker_not_found"


class CourtesyRecordNotFoundError(CourtesyNotFoundError):
    message_key = "courtesies.not_found"


class EventCancelledError(CourtesyConflictError):
    message_key = "courtesies.event_cancelled"


class CourtesyAlreadyGrantedError(CourtesyConflictError):
    """An ACTIVE or USED courtesy already exists for the (event, person) pair."""

    message_key = "courtesies.already_granted"


class GrantSerializationError(CourtesyConflictError):
    """The transaction lost a serialization race; the caller may retry."""

    message_key = "courtesies.concurrent_update"


class CourtesyNotActiveError(CourtesyConflictError):
    message_key = "courtesies.not_active"


class InvalidStatusTransitionError(CourtesyConflictError):
    message_key = "courtesies.invalid_transition"


class BlocksRequiredError(CourtesyInvalidRequestError):
    message_key = "courtesies.blocks_required"


class InvalidBlocksError(CourtesyInvalidRequestError):
    message_key = "courtesies.invalid_blocks"


class EventHasNoSpeakersError(CourtesyInvalidRequestError):
    message_key = "courtesies.no_speakers"


__all__ = [
    "BlocksRequiredError",
    "CourtesyAlreadyGrantedError",
    "CourtesyConflictError",
    "CourtesyError",
    "CourtesyInvalidRequestError",
    "CourtesyNotActiveError",
    "CourtesyNotFoundError",
    "CourtesyRecordNotFoundError",
    "EventCancelledError",
    "EventHasNoSpeakersError",
    "EventNotFoundError",
    "GrantSerializationError",
    "InvalidBlocksError",
    "InvalidStatusTransitionError",
    "SpeakerNotFoundError",
]
