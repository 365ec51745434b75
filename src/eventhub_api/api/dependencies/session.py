"""Session-aware dependencies for admin and member APIs."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub_api.api.dependencies.locale import request_locale
from eventhub_api.core.messages import get_localizer
from eventhub_api.db.session import get_session
from eventhub_api.models.user import User, UserRoleEnum, UserStatusEnum

COURTESY_ADMIN_ROLES = frozenset({UserRoleEnum.ORG_ADMIN.value, UserRoleEnum.SUPER_ADMIN.value})


def _auth_error(status_code: int, key: str, locale: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"code": key, "message": get_localizer().translate(key, locale)},
    )


async def require_session_user(
    session_user: str | None = Header(None, alias="X-Session-User"),
    db: AsyncSession = Depends(get_session),
    locale: str = Depends(request_locale),
) -> User:
    """Resolve the authenticated user from forwarded session headers."""

    if not session_user:
        raise _auth_error(status.HTTP_401_UNAUTHORIZED, "auth.session_missing", locale)

    try:
        user_id = UUID(session_user)
    except ValueError as error:
        raise _auth_error(status.HTTP_400_BAD_REQUEST, "auth.session_invalid", locale) from error

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status == UserStatusEnum.SUSPENDED.value:
        raise _auth_error(status.HTTP_404_NOT_FOUND, "auth.session_not_found", locale)

    return user


async def require_courtesy_admin(
    user: User = Depends(require_session_user),
    locale: str = Depends(request_locale),
) -> User:
    """Only organization and platform admins may grant or cancel courtesies."""

    if user.role not in COURTESY_ADMIN_ROLES:
        raise _auth_error(status.HTTP_403_FORBIDDEN, "auth.forbidden", locale)
    return user
