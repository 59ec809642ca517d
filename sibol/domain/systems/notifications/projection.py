"""
Projeção do log de eventos de manutenção em notificações legíveis.

Funções puras e totais: qualquer tipo de evento (inclusive desconhecido
ou ausente) produz um título e uma mensagem.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DEFAULT_TITLE = "Maintenance update"

EVENT_TITLES: dict[str, str] = {
    "REQUESTED": "Maintenance requested",
    "ACCEPTED": "Maintenance accepted",
    "REASSIGNED": "Maintenance reassigned",
    "ONGOING": "Maintenance started",
    "FOR_VERIFICATION": "Maintenance for verification",
    "COMPLETED": "Maintenance completed",
    "CANCELLED": "Maintenance cancelled",
    "REMARK_ADDED": "Maintenance remark added",
}


class NotificationType(str, enum.Enum):
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class EventFeedRow:
    """Linha crua lida do log de eventos, já com os joins resolvidos."""
    id: int
    ticket_id: Optional[int]
    event_type: Optional[str]
    created_at: datetime
    ticket_title: Optional[str] = None
    status_name: Optional[str] = None
    priority_name: Optional[str] = None
    actor_name: Optional[str] = None
    actor_username: Optional[str] = None
    read: bool = False


@dataclass(frozen=True)
class Notification:
    id: int
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    read: bool
    ticket_id: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    event_type: Optional[str] = None


def build_title(event_type: Optional[str], ticket_id: Optional[int] = None) -> str:
    base = EVENT_TITLES.get(event_type or "", DEFAULT_TITLE)
    return f"{base}: Request #{ticket_id}" if ticket_id else base


def build_message(event_type: Optional[str], actor_name: Optional[str], ticket_title: Optional[str]) -> str:
    actor = actor_name.strip() if actor_name and actor_name.strip() else "Someone"
    kind = (event_type or "update").lower()
    where = f" in {ticket_title}" if ticket_title else ""
    return f"{actor} sent a {kind}{where}."


def project(row: EventFeedRow) -> Notification:
    actor = row.actor_name or row.actor_username
    return Notification(
        id=row.id,
        type=NotificationType.MAINTENANCE,
        title=build_title(row.event_type, row.ticket_id),
        message=build_message(row.event_type, actor, row.ticket_title),
        timestamp=row.created_at,
        read=row.read,
        ticket_id=row.ticket_id,
        priority=row.priority_name,
        status=row.status_name,
        event_type=row.event_type,
    )
