"""Entidade de domínio Ticket de manutenção — transições via tabela e eventos."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from sibol.domain.events.base import AggregateRoot
from sibol.domain.events.maintenance_events import (
    MaintenanceEvent,
    MaintenanceEventType,
    RemarkAdded,
    TicketAccepted,
    TicketCancelled,
    TicketCompleted,
    TicketMarkedOngoing,
    TicketReassigned,
    TicketRequested,
    TicketSentForVerification,
)
from sibol.domain.shared.exceptions import ValidationError
from sibol.domain.shared.value_objects import Remark, utcnow
from sibol.domain.systems.accounts.authorization_service import AuthorizationService
from sibol.domain.systems.accounts.entity import Actor
from sibol.domain.systems.maintenance.workflow import (
    TicketAction,
    TicketStatus,
    Transition,
    resolve_transition,
)


@dataclass
class TicketAttachment:
    """Anexo de ticket — nunca alterado depois de criado."""
    id: Optional[int] = None
    ticket_id: Optional[int] = None
    event_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    file_path: str = ""
    file_name: str = ""
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    folder: Optional[str] = None
    uploaded_at: datetime = field(default_factory=utcnow)


@dataclass
class TicketEvent:
    """Linha imutável do log de eventos (fonte das notificações)."""
    id: Optional[int] = None
    ticket_id: int = 0
    event_type: MaintenanceEventType = MaintenanceEventType.REQUESTED
    actor_id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Ticket(AggregateRoot):
    id: Optional[int] = None
    title: str = ""
    details: Optional[str] = None
    priority_id: Optional[int] = None
    priority: Optional[str] = None      # nome resolvido no catálogo
    status: TicketStatus = TicketStatus.REQUESTED
    created_by: Optional[int] = None    # FK → Account, imutável
    assigned_to: Optional[int] = None   # FK → Account, definido no accept
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    attachments: list[TicketAttachment] = field(default_factory=list)
    attachment_count: int = 0

    def __post_init__(self):
        AggregateRoot.__init__(self)

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("title não pode ser vazio")
        if self.created_by is None:
            raise ValidationError("created_by é obrigatório")

    # ── Transições ──

    def _transition(self, action: TicketAction, actor: Actor, *, allow_override: bool = False) -> Transition:
        """Valida (status, ação) na tabela e depois o ator. Não altera nada."""
        transition = resolve_transition(
            self.status, action, allow_completion_override=allow_override
        )
        transition.authorize(actor, created_by=self.created_by, assigned_to=self.assigned_to)
        return transition

    def _apply(self, transition: Transition, event: MaintenanceEvent) -> None:
        self.status = transition.target
        self.updated_at = event.occurred_at
        self._record_event(event)

    def accept(
        self,
        actor: Actor,
        assignee_id: int,
        due_date: Optional[date],
        priority_id: Optional[int] = None,
    ) -> MaintenanceEvent:
        if due_date is None:
            raise ValidationError("due_date é obrigatório para aceitar o ticket")
        transition = self._transition(TicketAction.ACCEPT, actor)

        previous = self.assigned_to
        now = utcnow()
        if previous is not None and previous != assignee_id:
            event: MaintenanceEvent = TicketReassigned(
                ticket_id=self.id, actor_id=actor.account_id,
                old_assignee=previous, new_assignee=assignee_id, occurred_at=now,
            )
        else:
            event = TicketAccepted(
                ticket_id=self.id, actor_id=actor.account_id,
                assigned_to=assignee_id, occurred_at=now,
            )

        self.assigned_to = assignee_id
        self.due_date = due_date
        if priority_id is not None:
            self.priority_id = priority_id
        self._apply(transition, event)
        return event

    def mark_ongoing(self, actor: Actor) -> MaintenanceEvent:
        transition = self._transition(TicketAction.MARK_ONGOING, actor)
        event = TicketMarkedOngoing(ticket_id=self.id, actor_id=actor.account_id)
        self._apply(transition, event)
        return event

    def mark_for_verification(self, actor: Actor) -> MaintenanceEvent:
        transition = self._transition(TicketAction.MARK_FOR_VERIFICATION, actor)
        event = TicketSentForVerification(ticket_id=self.id, actor_id=actor.account_id)
        self._apply(transition, event)
        return event

    def verify_completion(self, actor: Actor, *, allow_override: bool = False) -> MaintenanceEvent:
        transition = self._transition(TicketAction.VERIFY_COMPLETION, actor, allow_override=allow_override)
        event = TicketCompleted(ticket_id=self.id, actor_id=actor.account_id)
        self.completed_at = event.occurred_at
        self._apply(transition, event)
        return event

    def cancel(self, actor: Actor) -> MaintenanceEvent:
        transition = self._transition(TicketAction.CANCEL, actor)
        event = TicketCancelled(
            ticket_id=self.id, actor_id=actor.account_id, previous_status=self.status.value,
        )
        self._apply(transition, event)
        return event

    # ── Observações (não alteram status) ──

    def add_remark(self, actor: Actor, text: str) -> MaintenanceEvent:
        AuthorizationService.ensure_can_annotate_ticket(actor, self.created_by, self.assigned_to)
        now = utcnow()
        remark = Remark(text=text, written_at=now)
        self.remarks = remark.append_to(self.remarks)
        self.updated_at = now
        event = RemarkAdded(
            ticket_id=self.id, actor_id=actor.account_id, remark=remark.text, occurred_at=now,
        )
        self._record_event(event)
        return event

    # ── Eventos auxiliares ──

    def record_creation(self) -> MaintenanceEvent:
        event = TicketRequested(
            ticket_id=self.id,
            actor_id=self.created_by,
            title=self.title,
            occurred_at=self.created_at or utcnow(),
        )
        self._record_event(event)
        return event
