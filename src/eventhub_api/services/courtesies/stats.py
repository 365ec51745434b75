from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub_api.models.courtesy import Courtesy, CourtesyScope, CourtesyStatus, CourtesyType

_SCOPE_KEYS = {
    CourtesyScope.FULL_EVENT: "fullEvent",
    CourtesyScope.ASSIGNED_SESSIONS_ONLY: "assignedSessions",
    CourtesyScope.SPECIFIC_BLOCKS: "specificBlocks",
}


def _zeroed(members) -> Dict:
    return {member: 0 for member in members}


@dataclass
class CourtesyStats:
    total: int = 0
    by_status: Dict[CourtesyStatus, int] = field(default_factory=lambda: _zeroed(CourtesyStatus))
    by_type: Dict[CourtesyType, int] = field(default_factory=lambda: _zeroed(CourtesyType))
    by_scope: Dict[CourtesyScope, int] = field(default_factory=lambda: _zeroed(CourtesyScope))

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"total": self.total}
        for status, count in self.by_status.items():
            payload[status.value.lower()] = count
        payload["byType"] = {kind.value.lower(): count for kind, count in self.by_type.items()}
        payload["byScope"] = {_SCOPE_KEYS[scope]: count for scope, count in self.by_scope.items()}
        return payload


class CourtesyStatsAggregator:
    """Count an event's courtesies by status, type and scope."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def collect(self, event_id: UUID) -> CourtesyStats:
        stmt = (
            select(Courtesy.status, Courtesy.type, Courtesy.scope, func.count(Courtesy.id))
            .where(Courtesy.event_id == event_id)
            .group_by(Courtesy.status, Courtesy.type, Courtesy.scope)
        )
        result = await self._session.execute(stmt)

        stats = CourtesyStats()
        for status, kind, scope, count in result.all():
            stats.total += count
            stats.by_status[status] += count
            stats.by_type[kind] += count
            stats.by_scope[scope] += count
        return stats


__all__ = ["CourtesyStats", "CourtesyStatsAggregator"]
