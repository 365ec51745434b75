"""Error taxonomy shared by the service layer and the HTTP surface."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_REQUEST = "invalid_request"


class DomainError(Exception):
    """Base error carrying a message catalog key instead of display text.

    Subclasses pin ``kind`` and ``message_key`` so the violated rule can be
    identified without parsing free text.
    """

    kind: ErrorKind = ErrorKind.INVALID_REQUEST
    message_key: str = "errors.unknown"

    def __init__(self, message_key: str | None = None, **params: Any) -> None:
        if message_key is not None:
            self.message_key = message_key
        self.params = params
        super().__init__(self.message_key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, key={self.message_key!r}, params={self.params!r})"


__all__ = ["DomainError", "ErrorKind"]
