"""DTOs do projetor de notificações."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class ListNotificationsQuery:
    type: str = "all"
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0
    unread_only: bool = False

    def clamped(self) -> tuple[int, int]:
        """(limit, offset) dentro dos limites aceitos pelo feed."""
        return min(max(self.limit, 1), MAX_PAGE_SIZE), max(self.offset, 0)


@dataclass(frozen=True)
class MarkReadCommand:
    type: str
    id: int


@dataclass(frozen=True)
class MarkAllReadCommand:
    type: str = "maintenance"


@dataclass
class NotificationResult:
    id: int
    type: str
    title: str
    message: str
    timestamp: Optional[str]
    read: bool
    ticket_id: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    event_type: Optional[str] = None


@dataclass
class MarkReadResult:
    success: bool = True
    marked: int = 0
