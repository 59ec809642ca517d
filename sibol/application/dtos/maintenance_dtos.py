"""DTOs da camada de aplicação para tickets de manutenção — commands e queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sibol.domain.shared.value_objects import AttachmentRef


# ════════════════════════════════════════════════════════════════
# COMMANDS
# ════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CreateTicketCommand:
    title: str
    details: Optional[str] = None
    priority: Optional[str] = None          # rótulo do catálogo: Critical | Urgent | Mild
    due_date: Optional[date] = None
    attachment: Optional[AttachmentRef] = None


@dataclass(frozen=True)
class AcceptTicketCommand:
    ticket_id: int
    assign_to: int
    due_date: Optional[date] = None         # obrigatório; validado no use case
    priority: Optional[str] = None
    attachment: Optional[AttachmentRef] = None


@dataclass(frozen=True)
class TicketActionCommand:
    """Transições sem payload: ongoing, for-verification, verify, cancel."""
    ticket_id: int


@dataclass(frozen=True)
class AddRemarksCommand:
    ticket_id: int
    remarks: str
    attachment: Optional[AttachmentRef] = None


@dataclass(frozen=True)
class BindAttachmentCommand:
    ticket_id: int
    uploaded_by: int
    attachment: AttachmentRef
    event_id: Optional[int] = None


# ════════════════════════════════════════════════════════════════
# QUERIES
# ════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GetTicketByIdQuery:
    ticket_id: int


@dataclass(frozen=True)
class ListTicketsQuery:
    status: Optional[str] = None            # rótulos separados por vírgula
    assigned_to: Optional[int] = None
    created_by: Optional[int] = None


# ════════════════════════════════════════════════════════════════
# RESULT DTOs
# ════════════════════════════════════════════════════════════════

@dataclass
class AttachmentResult:
    id: int
    ticket_id: int
    event_id: Optional[int]
    uploaded_by: Optional[int]
    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    folder: Optional[str] = None
    uploaded_at: Optional[str] = None


@dataclass
class TicketResult:
    id: int
    title: str
    details: Optional[str]
    status: str
    priority: Optional[str]
    created_by: Optional[int]
    assigned_to: Optional[int]
    due_date: Optional[str] = None
    completed_at: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    attachment_count: int = 0
    attachments: list[AttachmentResult] = field(default_factory=list)


@dataclass
class EventResult:
    id: int
    ticket_id: int
    event_type: str
    actor_id: Optional[int]
    created_at: Optional[str] = None


@dataclass
class TicketHistoryResult:
    ticket_id: int
    status: str
    replayed_status: Optional[str]
    events: list[EventResult] = field(default_factory=list)
