from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from .projection import EventFeedRow, NotificationType


class INotificationRepository(ABC):

    @abstractmethod
    async def list_feed(
        self,
        account_id: int,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> Sequence[EventFeedRow]:
        """Eventos mais recentes primeiro, com o flag de leitura de account_id."""
        ...

    @abstractmethod
    async def source_exists(self, notification_type: NotificationType, notification_id: int) -> bool:
        ...

    @abstractmethod
    async def mark_read(self, account_id: int, notification_type: NotificationType, notification_id: int) -> None:
        """Upsert idempotente (insert-or-ignore na chave composta)."""
        ...

    @abstractmethod
    async def mark_all_read(self, account_id: int, notification_type: NotificationType) -> int:
        """Um único INSERT … SELECT; retorna quantos marcadores foram criados."""
        ...
