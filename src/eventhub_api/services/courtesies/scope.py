from __future__ import annotations

from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import selectinload

from eventhub_api.db.unit_of_work import UnitOfWork
from eventhub_api.models.courtesy import CourtesyScope
from eventhub_api.models.evaluation import EvaluableBlock
from eventhub_api.services.courtesies.errors import BlocksRequiredError, InvalidBlocksError


def _dedupe(block_ids: Iterable[UUID]) -> list[UUID]:
    seen: set[UUID] = set()
    ordered: list[UUID] = []
    for block_id in block_ids:
        if block_id not in seen:
            seen.add(block_id)
            ordered.append(block_id)
    return ordered


class ScopeValidator:
    """Check the block set of a grant against its scope."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def resolve_blocks(
        self,
        scope: CourtesyScope,
        event_id: UUID,
        block_ids: Sequence[UUID],
    ) -> list[EvaluableBlock]:
        """Return the blocks a grant covers; empty unless scope is SPECIFIC_BLOCKS.

        Every requested block must belong to ``event_id`` and be active. The
        blocks come back with their sessions loaded, in request order.
        """

        if scope != CourtesyScope.SPECIFIC_BLOCKS:
            return []

        requested = _dedupe(block_ids)
        if not requested:
            raise BlocksRequiredError()

        blocks = await self._uow.blocks.find(
            EvaluableBlock.id.in_(requested),
            EvaluableBlock.event_id == event_id,
            EvaluableBlock.is_active.is_(True),
            options=(selectinload(EvaluableBlock.sessions),),
        )
        if len(blocks) != len(requested):
            found = {block.id for block in blocks}
            missing = [str(block_id) for block_id in requested if block_id not in found]
            raise InvalidBlocksError(event_id=str(event_id), block_ids=missing)

        by_id = {block.id: block for block in blocks}
        return [by_id[block_id] for block_id in requested]


__all__ = ["ScopeValidator"]
