"""Eager-load options for courtesy reads (async sessions cannot lazy load)."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub_api.models.courtesy import Courtesy

COURTESY_DETAIL_OPTIONS = (
    selectinload(Courtesy.event),
    selectinload(Courtesy.person),
    selectinload(Courtesy.attendee),
    selectinload(Courtesy.speaker),
    selectinload(Courtesy.granted_by),
    selectinload(Courtesy.cancelled_by),
    selectinload(Courtesy.specific_blocks),
    selectinload(Courtesy.registration),
    selectinload(Courtesy.block_enrollments),
)


async def reload_courtesy(session: AsyncSession, courtesy_id: UUID) -> Courtesy:
    """Re-read a courtesy written in this session with every relationship populated."""

    stmt = (
        select(Courtesy)
        .where(Courtesy.id == courtesy_id)
        .options(*COURTESY_DETAIL_OPTIONS)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one()


__all__ = ["COURTESY_DETAIL_OPTIONS", "reload_courtesy"]
