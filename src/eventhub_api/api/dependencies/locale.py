from fastapi import Header

from eventhub_api.core.messages import get_localizer


async def request_locale(accept_language: str | None = Header(None, alias="Accept-Language")) -> str:
    """Resolve the response locale from the Accept-Language header."""

    return get_localizer().negotiate(accept_language)
