from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sibol.domain.events.maintenance_events import MaintenanceEvent

from .entity import Ticket, TicketAttachment, TicketEvent


class ITicketRepository(ABC):

    @abstractmethod
    async def get_by_id(self, ticket_id: int, *, for_update: bool = False) -> Optional[Ticket]:
        """Com for_update=True a leitura trava a linha até o fim da transação."""
        ...

    @abstractmethod
    async def exists(self, ticket_id: int) -> bool:
        ...

    @abstractmethod
    async def list_filtered(
        self,
        *,
        status_ids: Optional[Sequence[int]] = None,
        assigned_to: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> Sequence[Ticket]:
        ...

    @abstractmethod
    async def create(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    async def update(self, ticket: Ticket) -> Ticket:
        ...

    # ── Attachments ──

    @abstractmethod
    async def add_attachment(self, attachment: TicketAttachment) -> TicketAttachment:
        ...

    @abstractmethod
    async def get_attachments(self, ticket_id: int) -> Sequence[TicketAttachment]:
        ...


class IMaintenanceEventLog(ABC):
    """Log append-only; nunca atualiza nem remove linhas."""

    @abstractmethod
    async def append(self, event: MaintenanceEvent) -> TicketEvent:
        ...

    @abstractmethod
    async def list_for_ticket(self, ticket_id: int) -> Sequence[TicketEvent]:
        """Eventos do ticket na ordem de commit."""
        ...
