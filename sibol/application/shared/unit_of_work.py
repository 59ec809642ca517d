"""
Unit of Work — garante transacionalidade e despacho de eventos.

Encapsula a sessão do banco. Os eventos coletados dos agregados são
gravados no log de eventos *dentro* da transação (mesmo commit do
ticket); após o commit bem-sucedido são despachados aos handlers.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.application.shared.event_dispatcher import dispatch_events
from sibol.domain.events.base import AggregateRoot, DomainEvent
from sibol.domain.events.maintenance_events import MaintenanceEvent
from sibol.domain.shared.exceptions import StorageError
from sibol.domain.systems.maintenance.entity import TicketEvent
from sibol.domain.systems.maintenance.repository import IMaintenanceEventLog

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session: AsyncSession, event_log: Optional[IMaintenanceEventLog] = None) -> None:
        self._session = session
        self._event_log = event_log
        self._pending_events: list[DomainEvent] = []

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def store_events_from(self, *aggregates: AggregateRoot) -> list[TicketEvent]:
        """
        Grava os eventos de manutenção pendentes no log (na transação
        corrente) e os agenda para despacho. Retorna as linhas gravadas,
        na ordem em que foram registradas.
        """
        if self._event_log is None:
            raise RuntimeError("UnitOfWork sem event log configurado")
        stored: list[TicketEvent] = []
        for agg in aggregates:
            for event in agg.collect_events():
                if isinstance(event, MaintenanceEvent):
                    stored.append(await self._event_log.append(event))
                self._pending_events.append(event)
        return stored

    async def commit(self) -> None:
        """Commit da sessão + despacho de eventos."""
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Falha no commit da transação")
            await self.rollback()
            raise StorageError("Falha ao gravar no banco de dados") from exc

        if self._pending_events:
            events, self._pending_events = self._pending_events, []
            await dispatch_events(events)

    async def rollback(self) -> None:
        await self._session.rollback()
        self._pending_events.clear()
