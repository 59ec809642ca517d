"""Implementação concreta dos repositórios de manutenção — SQLAlchemy com filtros."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.domain.events.maintenance_events import MaintenanceEvent, MaintenanceEventType
from sibol.domain.shared.exceptions import NotFoundError, StorageError
from sibol.domain.systems.maintenance.entity import Ticket, TicketAttachment, TicketEvent
from sibol.domain.systems.maintenance.repository import IMaintenanceEventLog, ITicketRepository
from sibol.domain.systems.maintenance.workflow import TicketStatus
from sibol.infrastructure.database.models import (
    MaintenanceAttachmentModel,
    MaintenanceEventModel,
    MaintenanceTicketModel,
)
from sibol.infrastructure.systems.catalog.repository import CatalogRepository


class TicketRepository(ITicketRepository):
    def __init__(self, session: AsyncSession, catalog: Optional[CatalogRepository] = None) -> None:
        self._session = session
        self._catalog = catalog or CatalogRepository(session)

    async def _to_entity(self, model: MaintenanceTicketModel, attachment_count: int = 0) -> Ticket:
        statuses = await self._catalog.status_names()
        priorities = await self._catalog.priority_names()
        return Ticket(
            id=model.id,
            title=model.title,
            details=model.details,
            priority_id=model.priority_id,
            priority=priorities.get(model.priority_id) if model.priority_id else None,
            status=TicketStatus(statuses[model.status_id]),
            created_by=model.created_by,
            assigned_to=model.assigned_to,
            due_date=model.due_date,
            completed_at=model.completed_at,
            remarks=model.remarks,
            created_at=model.created_at,
            updated_at=model.updated_at,
            attachment_count=attachment_count,
        )

    async def _status_id(self, status: TicketStatus) -> int:
        status_id = await self._catalog.resolve_status_id(status.value)
        if status_id is None:
            raise StorageError(f"Status '{status.value}' não configurado no catálogo")
        return status_id

    @staticmethod
    def _attachment_to_entity(model: MaintenanceAttachmentModel) -> TicketAttachment:
        return TicketAttachment(
            id=model.id,
            ticket_id=model.ticket_id,
            event_id=model.event_id,
            uploaded_by=model.uploaded_by,
            file_path=model.file_path,
            file_name=model.file_name,
            file_type=model.file_type,
            file_size=model.file_size,
            folder=model.folder,
            uploaded_at=model.uploaded_at,
        )

    # ── Leitura ──

    async def get_by_id(self, ticket_id: int, *, for_update: bool = False) -> Optional[Ticket]:
        stmt = select(MaintenanceTicketModel).where(MaintenanceTicketModel.id == ticket_id)
        if for_update:
            # SELECT … FOR UPDATE; populate_existing descarta a cópia do identity map
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        ticket = await self._to_entity(model)
        ticket.attachments = list(await self.get_attachments(ticket_id))
        ticket.attachment_count = len(ticket.attachments)
        return ticket

    async def exists(self, ticket_id: int) -> bool:
        result = await self._session.execute(
            select(MaintenanceTicketModel.id).where(MaintenanceTicketModel.id == ticket_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_filtered(
        self,
        *,
        status_ids: Optional[Sequence[int]] = None,
        assigned_to: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> Sequence[Ticket]:
        counts = (
            select(
                MaintenanceAttachmentModel.ticket_id,
                func.count(MaintenanceAttachmentModel.id).label("attachment_count"),
            )
            .group_by(MaintenanceAttachmentModel.ticket_id)
            .subquery()
        )
        stmt = (
            select(MaintenanceTicketModel, func.coalesce(counts.c.attachment_count, 0))
            .outerjoin(counts, counts.c.ticket_id == MaintenanceTicketModel.id)
        )
        if status_ids:
            stmt = stmt.where(MaintenanceTicketModel.status_id.in_(list(status_ids)))
        if assigned_to is not None:
            stmt = stmt.where(MaintenanceTicketModel.assigned_to == assigned_to)
        if created_by is not None:
            stmt = stmt.where(MaintenanceTicketModel.created_by == created_by)
        stmt = stmt.order_by(MaintenanceTicketModel.created_at.desc(), MaintenanceTicketModel.id.desc())

        result = await self._session.execute(stmt)
        return [await self._to_entity(model, int(count)) for model, count in result.all()]

    # ── Escrita ──

    async def create(self, ticket: Ticket) -> Ticket:
        model = MaintenanceTicketModel(
            title=ticket.title,
            details=ticket.details,
            priority_id=ticket.priority_id,
            status_id=await self._status_id(ticket.status),
            created_by=ticket.created_by,
            assigned_to=ticket.assigned_to,
            due_date=ticket.due_date,
            remarks=ticket.remarks,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        return await self._to_entity(model)

    async def update(self, ticket: Ticket) -> Ticket:
        model = await self._session.get(MaintenanceTicketModel, ticket.id)
        if not model:
            raise NotFoundError("Ticket", ticket.id)
        model.priority_id = ticket.priority_id
        model.status_id = await self._status_id(ticket.status)
        model.assigned_to = ticket.assigned_to
        model.due_date = ticket.due_date
        model.completed_at = ticket.completed_at
        model.remarks = ticket.remarks
        model.updated_at = ticket.updated_at
        await self._session.flush()
        return await self._to_entity(model, ticket.attachment_count)

    # ── Attachments ──

    async def add_attachment(self, attachment: TicketAttachment) -> TicketAttachment:
        model = MaintenanceAttachmentModel(
            ticket_id=attachment.ticket_id,
            event_id=attachment.event_id,
            uploaded_by=attachment.uploaded_by,
            file_path=attachment.file_path,
            file_name=attachment.file_name,
            file_type=attachment.file_type,
            file_size=attachment.file_size,
            folder=attachment.folder,
            uploaded_at=attachment.uploaded_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._attachment_to_entity(model)

    async def get_attachments(self, ticket_id: int) -> list[TicketAttachment]:
        stmt = (
            select(MaintenanceAttachmentModel)
            .where(MaintenanceAttachmentModel.ticket_id == ticket_id)
            .order_by(MaintenanceAttachmentModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._attachment_to_entity(m) for m in result.scalars().all()]


class MaintenanceEventLogRepository(IMaintenanceEventLog):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_entity(model: MaintenanceEventModel) -> TicketEvent:
        return TicketEvent(
            id=model.id,
            ticket_id=model.ticket_id,
            event_type=MaintenanceEventType(model.event_type),
            actor_id=model.actor_id,
            created_at=model.created_at,
        )

    async def append(self, event: MaintenanceEvent) -> TicketEvent:
        model = MaintenanceEventModel(
            ticket_id=event.ticket_id,
            event_type=event.event_type.value,
            actor_id=event.actor_id,
            created_at=event.occurred_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_ticket(self, ticket_id: int) -> list[TicketEvent]:
        stmt = (
            select(MaintenanceEventModel)
            .where(MaintenanceEventModel.ticket_id == ticket_id)
            .order_by(MaintenanceEventModel.created_at.asc(), MaintenanceEventModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]
