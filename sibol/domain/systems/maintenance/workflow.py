"""
State machine dos tickets de manutenção.

A tabela ``TRANSITIONS`` é a única fonte de verdade: adicionar uma
transição é uma mudança de dados, não um novo caminho de código.

    Requested        --accept-->                On-going
    On-going         --accept-->                On-going   (reatribuição)
    On-going         --mark_ongoing-->          On-going
    On-going         --mark_for_verification--> For Verification
    For Verification --verify_completion-->     Completed
    {não terminais}  --cancel-->                Cancelled
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from sibol.domain.events.maintenance_events import MaintenanceEventType
from sibol.domain.shared.exceptions import ConflictError
from sibol.domain.systems.accounts.authorization_service import AuthorizationService
from sibol.domain.systems.accounts.entity import Actor, Role


class TicketStatus(str, enum.Enum):
    # Os valores são os rótulos do catálogo de status
    REQUESTED = "Requested"
    ON_GOING = "On-going"
    FOR_VERIFICATION = "For Verification"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TicketStatus.COMPLETED, TicketStatus.CANCELLED})


class TicketAction(str, enum.Enum):
    ACCEPT = "accept"
    MARK_ONGOING = "mark_ongoing"
    MARK_FOR_VERIFICATION = "mark_for_verification"
    VERIFY_COMPLETION = "verify_completion"
    CANCEL = "cancel"


class ActorRule(str, enum.Enum):
    ROLE = "role"                       # papel do ator ∈ roles
    ASSIGNEE = "assignee"               # papel ∈ roles e ator == assigned_to
    CREATOR_OR_ROLE = "creator_or_role" # ator == created_by ou papel ∈ roles


_STAFF = frozenset({Role.STAFF, Role.ADMIN})
_OPERATOR = frozenset({Role.OPERATOR})


@dataclass(frozen=True)
class Transition:
    action: TicketAction
    source: TicketStatus
    target: TicketStatus
    roles: frozenset[Role]
    rule: ActorRule = ActorRule.ROLE

    def authorize(self, actor: Actor, *, created_by: Optional[int], assigned_to: Optional[int]) -> None:
        if self.rule is ActorRule.ASSIGNEE:
            AuthorizationService.ensure_is_assignee(actor, assigned_to, self.roles, self.action.value)
        elif self.rule is ActorRule.CREATOR_OR_ROLE:
            AuthorizationService.ensure_creator_or_role(actor, created_by, self.roles, self.action.value)
        else:
            AuthorizationService.ensure_role(actor, self.roles, self.action.value)


def _table(rows: Iterable[Transition]) -> dict[tuple[TicketStatus, TicketAction], Transition]:
    return {(t.source, t.action): t for t in rows}


TRANSITIONS: dict[tuple[TicketStatus, TicketAction], Transition] = _table([
    Transition(TicketAction.ACCEPT, TicketStatus.REQUESTED, TicketStatus.ON_GOING, _STAFF),
    Transition(TicketAction.ACCEPT, TicketStatus.ON_GOING, TicketStatus.ON_GOING, _STAFF),
    Transition(TicketAction.MARK_ONGOING, TicketStatus.ON_GOING, TicketStatus.ON_GOING, _OPERATOR, ActorRule.ASSIGNEE),
    Transition(
        TicketAction.MARK_FOR_VERIFICATION, TicketStatus.ON_GOING, TicketStatus.FOR_VERIFICATION,
        _OPERATOR, ActorRule.ASSIGNEE,
    ),
    Transition(TicketAction.VERIFY_COMPLETION, TicketStatus.FOR_VERIFICATION, TicketStatus.COMPLETED, _STAFF),
    *(
        Transition(TicketAction.CANCEL, source, TicketStatus.CANCELLED, _STAFF, ActorRule.CREATOR_OR_ROLE)
        for source in (TicketStatus.REQUESTED, TicketStatus.ON_GOING, TicketStatus.FOR_VERIFICATION)
    ),
])

# Override de staff: concluir sem passar por "For Verification".
# Só habilitado com STRICT_COMPLETION_VERIFICATION=false.
COMPLETION_OVERRIDES: dict[tuple[TicketStatus, TicketAction], Transition] = _table([
    Transition(TicketAction.VERIFY_COMPLETION, TicketStatus.REQUESTED, TicketStatus.COMPLETED, _STAFF),
    Transition(TicketAction.VERIFY_COMPLETION, TicketStatus.ON_GOING, TicketStatus.COMPLETED, _STAFF),
])


def resolve_transition(
    status: TicketStatus,
    action: TicketAction,
    *,
    allow_completion_override: bool = False,
) -> Transition:
    """Retorna a transição para (status, ação) ou levanta ConflictError."""
    transition = TRANSITIONS.get((status, action))
    if transition is None and allow_completion_override:
        transition = COMPLETION_OVERRIDES.get((status, action))
    if transition is None:
        raise ConflictError(f"Transição inválida: '{action.value}' a partir de '{status.value}'")
    return transition


# ── Replay do log de eventos ──

_EVENT_ACTIONS: dict[MaintenanceEventType, TicketAction] = {
    MaintenanceEventType.ACCEPTED: TicketAction.ACCEPT,
    MaintenanceEventType.REASSIGNED: TicketAction.ACCEPT,
    MaintenanceEventType.ONGOING: TicketAction.MARK_ONGOING,
    MaintenanceEventType.FOR_VERIFICATION: TicketAction.MARK_FOR_VERIFICATION,
    MaintenanceEventType.COMPLETED: TicketAction.VERIFY_COMPLETION,
    MaintenanceEventType.CANCELLED: TicketAction.CANCEL,
}


def replay_status(event_types: Iterable[MaintenanceEventType | str]) -> Optional[TicketStatus]:
    """
    Fold determinístico do log de eventos de um ticket.

    REQUESTED inicia o ticket; cada evento seguinte só é aplicado se for
    uma aresta válida a partir do estado corrente (a última transição
    válida vence). REMARK_ADDED e eventos desconhecidos não alteram o estado.
    Eventos gravados por override de conclusão também são aceitos.
    """
    status: Optional[TicketStatus] = None
    for raw in event_types:
        try:
            event_type = MaintenanceEventType(raw)
        except ValueError:
            continue
        if event_type is MaintenanceEventType.REQUESTED:
            if status is None:
                status = TicketStatus.REQUESTED
            continue
        action = _EVENT_ACTIONS.get(event_type)
        if action is None or status is None:
            continue
        transition = TRANSITIONS.get((status, action)) or COMPLETION_OVERRIDES.get((status, action))
        if transition is not None:
            status = transition.target
    return status
