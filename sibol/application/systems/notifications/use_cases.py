"""
Use Cases de Notificações — feed projetado sobre o log de eventos e
marcadores de leitura por conta.
"""

from __future__ import annotations

import logging

from sibol.application.dtos.notification_dtos import (
    ListNotificationsQuery,
    MarkAllReadCommand,
    MarkReadCommand,
    MarkReadResult,
    NotificationResult,
)
from sibol.application.shared.unit_of_work import UnitOfWork
from sibol.domain.shared.exceptions import NotFoundError, ValidationError
from sibol.domain.systems.accounts.entity import Actor
from sibol.domain.systems.notifications.projection import Notification, NotificationType, project
from sibol.domain.systems.notifications.repository import INotificationRepository

logger = logging.getLogger(__name__)

# "all" equivale hoje à única fonte de notificações (manutenção)
_FEED_TYPES = {"all", NotificationType.MAINTENANCE.value}


def _notification_type(raw: str) -> NotificationType:
    try:
        return NotificationType((raw or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Tipo de notificação inválido: '{raw}'") from None


def _to_result(n: Notification) -> NotificationResult:
    return NotificationResult(
        id=n.id,
        type=n.type.value,
        title=n.title,
        message=n.message,
        timestamp=n.timestamp.isoformat() if n.timestamp else None,
        read=n.read,
        ticket_id=n.ticket_id,
        priority=n.priority,
        status=n.status,
        event_type=n.event_type,
    )


class ListNotificationsUseCase:
    def __init__(self, repo: INotificationRepository) -> None:
        self._repo = repo

    async def execute(self, query: ListNotificationsQuery, actor: Actor) -> list[NotificationResult]:
        if (query.type or "all").strip().lower() not in _FEED_TYPES:
            raise ValidationError(f"Tipo de notificação inválido: '{query.type}'")
        limit, offset = query.clamped()
        rows = await self._repo.list_feed(
            actor.account_id, limit=limit, offset=offset, unread_only=query.unread_only,
        )
        return [_to_result(project(row)) for row in rows]


class MarkNotificationReadUseCase:
    def __init__(self, repo: INotificationRepository, uow: UnitOfWork) -> None:
        self._repo = repo
        self._uow = uow

    async def execute(self, cmd: MarkReadCommand, actor: Actor) -> MarkReadResult:
        notification_type = _notification_type(cmd.type)
        if not await self._repo.source_exists(notification_type, cmd.id):
            raise NotFoundError("Notificação", cmd.id)
        await self._repo.mark_read(actor.account_id, notification_type, cmd.id)
        await self._uow.commit()
        return MarkReadResult(success=True, marked=1)


class MarkAllNotificationsReadUseCase:
    def __init__(self, repo: INotificationRepository, uow: UnitOfWork) -> None:
        self._repo = repo
        self._uow = uow

    async def execute(self, cmd: MarkAllReadCommand, actor: Actor) -> MarkReadResult:
        notification_type = _notification_type(cmd.type)
        marked = await self._repo.mark_all_read(actor.account_id, notification_type)
        await self._uow.commit()
        logger.info("Account %s marked %d %s notifications as read", actor.account_id, marked, notification_type.value)
        return MarkReadResult(success=True, marked=marked)
