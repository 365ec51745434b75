"""Identity resolution services."""

from .attendees import AttendeeMaterializer  # noqa: F401
from .errors import (  # noqa: F401
    IdentityError,
    PersonConflictError,
    PersonNotFoundError,
    PersonRequiredError,
)
from .resolver import IdentityResolver, PersonData  # noqa: F401
