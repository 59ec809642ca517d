"""Catálogo de status/prioridades — lido uma vez por sessão e mantido em memória."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.domain.systems.catalog.repository import CatalogEntry, ICatalogRepository
from sibol.infrastructure.database.models import MaintenancePriorityModel, MaintenanceStatusModel


class CatalogRepository(ICatalogRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._statuses: Optional[dict[int, str]] = None
        self._priorities: Optional[dict[int, str]] = None

    async def _load(self, model) -> dict[int, str]:
        result = await self._session.execute(select(model.id, model.name).order_by(model.id))
        return {row.id: row.name for row in result.all()}

    async def status_names(self) -> dict[int, str]:
        if self._statuses is None:
            self._statuses = await self._load(MaintenanceStatusModel)
        return self._statuses

    async def priority_names(self) -> dict[int, str]:
        if self._priorities is None:
            self._priorities = await self._load(MaintenancePriorityModel)
        return self._priorities

    @staticmethod
    def _lookup(names: dict[int, str], label: str) -> Optional[int]:
        wanted = label.strip().lower()
        return next((i for i, n in names.items() if n.lower() == wanted), None)

    async def resolve_status_id(self, name: str) -> Optional[int]:
        return self._lookup(await self.status_names(), name)

    async def resolve_priority_id(self, name: str) -> Optional[int]:
        return self._lookup(await self.priority_names(), name)

    async def list_priorities(self) -> Sequence[CatalogEntry]:
        names = await self.priority_names()
        return [CatalogEntry(id=i, name=n) for i, n in names.items()]
