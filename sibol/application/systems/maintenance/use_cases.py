"""
Use Cases de Manutenção — camada de Aplicação.

Cada operação roda numa única transação: lê o ticket com trava de linha,
aplica a transição no agregado, grava os eventos no log e vincula o
anexo opcional ao evento emitido. Nada é gravado se qualquer passo falhar.
"""

from __future__ import annotations

import logging
from typing import Optional

from sibol.application.dtos.maintenance_dtos import (
    AcceptTicketCommand,
    AddRemarksCommand,
    AttachmentResult,
    BindAttachmentCommand,
    CreateTicketCommand,
    EventResult,
    GetTicketByIdQuery,
    ListTicketsQuery,
    TicketActionCommand,
    TicketHistoryResult,
    TicketResult,
)
from sibol.application.shared.unit_of_work import UnitOfWork
from sibol.application.systems.maintenance.attachment_binder import AttachmentBinder
from sibol.domain.shared.exceptions import NotFoundError, ValidationError
from sibol.domain.shared.value_objects import AttachmentRef
from sibol.domain.systems.accounts.authorization_service import AuthorizationService
from sibol.domain.systems.accounts.entity import Actor, Role
from sibol.domain.systems.accounts.repository import IAccountRepository
from sibol.domain.systems.catalog.repository import CatalogEntry, ICatalogRepository
from sibol.domain.systems.maintenance.entity import Ticket, TicketAttachment, TicketEvent
from sibol.domain.systems.maintenance.repository import IMaintenanceEventLog, ITicketRepository
from sibol.domain.systems.maintenance.workflow import replay_status

logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _attachment_result(a: TicketAttachment) -> AttachmentResult:
    return AttachmentResult(
        id=a.id,
        ticket_id=a.ticket_id,
        event_id=a.event_id,
        uploaded_by=a.uploaded_by,
        file_path=a.file_path,
        file_name=a.file_name,
        file_type=a.file_type,
        file_size=a.file_size,
        folder=a.folder,
        uploaded_at=_iso(a.uploaded_at),
    )


def _to_result(t: Ticket) -> TicketResult:
    return TicketResult(
        id=t.id,
        title=t.title,
        details=t.details,
        status=t.status.value,
        priority=t.priority,
        created_by=t.created_by,
        assigned_to=t.assigned_to,
        due_date=_iso(t.due_date),
        completed_at=_iso(t.completed_at),
        remarks=t.remarks,
        created_at=_iso(t.created_at),
        updated_at=_iso(t.updated_at),
        attachment_count=t.attachment_count,
        attachments=[_attachment_result(a) for a in t.attachments],
    )


def _event_result(e: TicketEvent) -> EventResult:
    return EventResult(
        id=e.id,
        ticket_id=e.ticket_id,
        event_type=e.event_type.value,
        actor_id=e.actor_id,
        created_at=_iso(e.created_at),
    )


async def _resolve_priority(catalog: ICatalogRepository, label: Optional[str]) -> Optional[int]:
    if label is None or not label.strip():
        return None
    priority_id = await catalog.resolve_priority_id(label.strip())
    if priority_id is None:
        raise ValidationError(f"Prioridade desconhecida: '{label}'")
    return priority_id


async def _load_for_update(repo: ITicketRepository, ticket_id: int) -> Ticket:
    ticket = await repo.get_by_id(ticket_id, for_update=True)
    if not ticket:
        raise NotFoundError("Ticket", ticket_id)
    return ticket


class _TicketMutation:
    """Base dos use cases que alteram um ticket: trava, aplica, grava, vincula anexo."""

    def __init__(self, repo: ITicketRepository, uow: UnitOfWork, binder: Optional[AttachmentBinder] = None) -> None:
        self._repo = repo
        self._uow = uow
        self._binder = binder or AttachmentBinder(repo)

    async def _persist(
        self,
        ticket: Ticket,
        actor: Actor,
        attachment: Optional[AttachmentRef] = None,
    ) -> TicketResult:
        await self._repo.update(ticket)
        stored = await self._uow.store_events_from(ticket)
        if attachment is not None:
            created = await self._binder.bind(
                BindAttachmentCommand(
                    ticket_id=ticket.id,
                    uploaded_by=actor.account_id,
                    attachment=attachment,
                    event_id=stored[-1].id if stored else None,
                ),
                ticket_known=True,
            )
            ticket.attachments.append(created)
            ticket.attachment_count += 1
        await self._uow.commit()

        for event in stored:
            logger.info(
                "Ticket %s: %s by account %s → %s",
                ticket.id, event.event_type.value, actor.account_id, ticket.status.value,
            )
        # Nomes do catálogo (prioridade pode ter mudado no accept)
        refreshed = await self._repo.get_by_id(ticket.id)
        return _to_result(refreshed or ticket)


# ════════════════════════════════════════════════════════════════
# COMANDOS
# ════════════════════════════════════════════════════════════════

class CreateTicketUseCase(_TicketMutation):
    def __init__(
        self,
        repo: ITicketRepository,
        catalog: ICatalogRepository,
        uow: UnitOfWork,
        binder: Optional[AttachmentBinder] = None,
    ) -> None:
        super().__init__(repo, uow, binder)
        self._catalog = catalog

    async def execute(self, cmd: CreateTicketCommand, actor: Actor) -> TicketResult:
        AuthorizationService.ensure_can_create_ticket(actor)

        ticket = Ticket(
            title=(cmd.title or "").strip(),
            details=cmd.details,
            priority_id=await _resolve_priority(self._catalog, cmd.priority),
            created_by=actor.account_id,
            due_date=cmd.due_date,
        )
        ticket.validate()
        ticket.updated_at = ticket.created_at

        created = await self._repo.create(ticket)
        created.record_creation()
        stored = await self._uow.store_events_from(created)
        if cmd.attachment is not None:
            attachment = await self._binder.bind(
                BindAttachmentCommand(
                    ticket_id=created.id,
                    uploaded_by=actor.account_id,
                    attachment=cmd.attachment,
                    event_id=stored[0].id,
                ),
                ticket_known=True,
            )
            created.attachments.append(attachment)
            created.attachment_count = 1
        await self._uow.commit()

        logger.info("Ticket %s requested by account %s", created.id, actor.account_id)
        return _to_result(created)


class AcceptAndAssignUseCase(_TicketMutation):
    def __init__(
        self,
        repo: ITicketRepository,
        accounts: IAccountRepository,
        catalog: ICatalogRepository,
        uow: UnitOfWork,
        binder: Optional[AttachmentBinder] = None,
    ) -> None:
        super().__init__(repo, uow, binder)
        self._accounts = accounts
        self._catalog = catalog

    async def execute(self, cmd: AcceptTicketCommand, actor: Actor) -> TicketResult:
        if cmd.due_date is None:
            raise ValidationError("due_date é obrigatório para aceitar o ticket")

        ticket = await _load_for_update(self._repo, cmd.ticket_id)

        assignee = await self._accounts.get_by_id(cmd.assign_to)
        if not assignee:
            raise NotFoundError("Conta", cmd.assign_to)
        if assignee.role != Role.OPERATOR:
            raise ValidationError(f"Conta {cmd.assign_to} não é um operador")

        priority_id = await _resolve_priority(self._catalog, cmd.priority)
        ticket.accept(actor, assignee.id, cmd.due_date, priority_id)
        return await self._persist(ticket, actor, cmd.attachment)


class MarkOnGoingUseCase(_TicketMutation):
    async def execute(self, cmd: TicketActionCommand, actor: Actor) -> TicketResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        ticket.mark_ongoing(actor)
        return await self._persist(ticket, actor)


class MarkForVerificationUseCase(_TicketMutation):
    async def execute(self, cmd: TicketActionCommand, actor: Actor) -> TicketResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        ticket.mark_for_verification(actor)
        return await self._persist(ticket, actor)


class VerifyCompletionUseCase(_TicketMutation):
    def __init__(
        self,
        repo: ITicketRepository,
        uow: UnitOfWork,
        *,
        strict: bool = True,
        binder: Optional[AttachmentBinder] = None,
    ) -> None:
        super().__init__(repo, uow, binder)
        self._strict = strict

    async def execute(self, cmd: TicketActionCommand, actor: Actor) -> TicketResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        ticket.verify_completion(actor, allow_override=not self._strict)
        return await self._persist(ticket, actor)


class CancelTicketUseCase(_TicketMutation):
    async def execute(self, cmd: TicketActionCommand, actor: Actor) -> TicketResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        ticket.cancel(actor)
        return await self._persist(ticket, actor)


class AddRemarksUseCase(_TicketMutation):
    async def execute(self, cmd: AddRemarksCommand, actor: Actor) -> TicketResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        ticket.add_remark(actor, cmd.remarks)
        return await self._persist(ticket, actor, cmd.attachment)


class UploadAttachmentUseCase:
    """Anexo avulso (sem evento): qualquer ator que possa anotar o ticket."""

    def __init__(self, repo: ITicketRepository, uow: UnitOfWork, binder: Optional[AttachmentBinder] = None) -> None:
        self._repo = repo
        self._uow = uow
        self._binder = binder or AttachmentBinder(repo)

    async def execute(self, cmd: BindAttachmentCommand, actor: Actor) -> AttachmentResult:
        ticket = await _load_for_update(self._repo, cmd.ticket_id)
        AuthorizationService.ensure_can_annotate_ticket(actor, ticket.created_by, ticket.assigned_to)
        created = await self._binder.bind(cmd, ticket_known=True)
        await self._uow.commit()
        return _attachment_result(created)


# ════════════════════════════════════════════════════════════════
# CONSULTAS
# ════════════════════════════════════════════════════════════════

class GetTicketUseCase:
    def __init__(self, repo: ITicketRepository) -> None:
        self._repo = repo

    async def execute(self, query: GetTicketByIdQuery) -> TicketResult:
        ticket = await self._repo.get_by_id(query.ticket_id)
        if not ticket:
            raise NotFoundError("Ticket", query.ticket_id)
        return _to_result(ticket)


class ListTicketsUseCase:
    def __init__(self, repo: ITicketRepository, catalog: ICatalogRepository) -> None:
        self._repo = repo
        self._catalog = catalog

    async def _status_ids(self, raw: Optional[str]) -> Optional[list[int]]:
        labels = [s.strip() for s in (raw or "").split(",") if s.strip()]
        if not labels:
            return None
        ids = []
        for label in labels:
            status_id = await self._catalog.resolve_status_id(label)
            if status_id is None:
                raise ValidationError(f"Status desconhecido: '{label}'")
            ids.append(status_id)
        return ids

    async def execute(self, query: ListTicketsQuery) -> list[TicketResult]:
        tickets = await self._repo.list_filtered(
            status_ids=await self._status_ids(query.status),
            assigned_to=query.assigned_to,
            created_by=query.created_by,
        )
        return [_to_result(t) for t in tickets]


class ListTicketAttachmentsUseCase:
    def __init__(self, repo: ITicketRepository) -> None:
        self._repo = repo

    async def execute(self, query: GetTicketByIdQuery) -> list[AttachmentResult]:
        if not await self._repo.exists(query.ticket_id):
            raise NotFoundError("Ticket", query.ticket_id)
        return [_attachment_result(a) for a in await self._repo.get_attachments(query.ticket_id)]


class ListTicketEventsUseCase:
    """Trilha de auditoria do ticket + status reconstruído pelo replay do log."""

    def __init__(self, repo: ITicketRepository, event_log: IMaintenanceEventLog) -> None:
        self._repo = repo
        self._event_log = event_log

    async def execute(self, query: GetTicketByIdQuery) -> TicketHistoryResult:
        ticket = await self._repo.get_by_id(query.ticket_id)
        if not ticket:
            raise NotFoundError("Ticket", query.ticket_id)
        events = await self._event_log.list_for_ticket(query.ticket_id)
        replayed = replay_status(e.event_type for e in events)
        return TicketHistoryResult(
            ticket_id=ticket.id,
            status=ticket.status.value,
            replayed_status=replayed.value if replayed else None,
            events=[_event_result(e) for e in events],
        )


class ListPrioritiesUseCase:
    def __init__(self, catalog: ICatalogRepository) -> None:
        self._catalog = catalog

    async def execute(self) -> list[CatalogEntry]:
        return list(await self._catalog.list_priorities())
