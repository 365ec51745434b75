from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhub_api.db.session import get_session_factory
from eventhub_api.services.courtesies.service import CourtesyService


def get_courtesy_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CourtesyService:
    return CourtesyService(session_factory)
