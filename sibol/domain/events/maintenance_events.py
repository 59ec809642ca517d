"""Eventos de domínio do fluxo de manutenção."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Optional

from sibol.domain.events.base import DomainEvent


class MaintenanceEventType(str, enum.Enum):
    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    REASSIGNED = "REASSIGNED"
    ONGOING = "ONGOING"
    FOR_VERIFICATION = "FOR_VERIFICATION"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REMARK_ADDED = "REMARK_ADDED"


@dataclass(frozen=True)
class MaintenanceEvent(DomainEvent):
    """Uma transição (ou anotação) aceita em um ticket."""
    event_type: ClassVar[MaintenanceEventType]

    ticket_id: int = 0
    actor_id: Optional[int] = None


@dataclass(frozen=True)
class TicketRequested(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.REQUESTED
    title: str = ""


@dataclass(frozen=True)
class TicketAccepted(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.ACCEPTED
    assigned_to: Optional[int] = None


@dataclass(frozen=True)
class TicketReassigned(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.REASSIGNED
    old_assignee: Optional[int] = None
    new_assignee: Optional[int] = None


@dataclass(frozen=True)
class TicketMarkedOngoing(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.ONGOING


@dataclass(frozen=True)
class TicketSentForVerification(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.FOR_VERIFICATION


@dataclass(frozen=True)
class TicketCompleted(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.COMPLETED


@dataclass(frozen=True)
class TicketCancelled(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.CANCELLED
    previous_status: str = ""


@dataclass(frozen=True)
class RemarkAdded(MaintenanceEvent):
    event_type: ClassVar[MaintenanceEventType] = MaintenanceEventType.REMARK_ADDED
    remark: str = ""
