from eventhub_api.core.errors import DomainError, ErrorKind


class IdentityError(DomainError):
    """Raised when a person reference cannot be resolved."""


class PersonNotFoundError(IdentityError):
    kind = ErrorKind.NOT_FOUND
    message_key = "courtesies.person_not_found"


class PersonRequiredError(IdentityError):
    kind = ErrorKind.INVALID_REQUEST
    message_key = "courtesies.person_required"


class PersonConflictError(IdentityError):
    kind = ErrorKind.CONFLICT
    message_key = "courtesies.person_document_taken"


__all__ = [
    "IdentityError",
    "PersonConflictError",
    "PersonNotFoundError",
    "PersonRequiredError",
]
