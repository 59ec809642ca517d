"""Feed de notificações sobre o log de eventos + marcadores de leitura."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import Integer, String, and_, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.domain.shared.exceptions import StorageError
from sibol.domain.systems.notifications.projection import EventFeedRow, NotificationType
from sibol.domain.systems.notifications.repository import INotificationRepository
from sibol.infrastructure.database.models import (
    AccountModel,
    MaintenanceEventModel,
    MaintenancePriorityModel,
    MaintenanceStatusModel,
    MaintenanceTicketModel,
    NotificationReadModel,
)

_MARKER_KEY = ["account_id", "notification_type", "notification_id"]


class NotificationRepository(INotificationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _insert(self):
        """INSERT do dialeto corrente — precisamos de ON CONFLICT DO NOTHING."""
        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(NotificationReadModel)
        if dialect == "sqlite":
            return sqlite.insert(NotificationReadModel)
        raise StorageError(f"Dialeto sem suporte a upsert: {dialect}")

    @staticmethod
    def _marker_join(account_id: int, notification_type: NotificationType):
        return and_(
            NotificationReadModel.notification_id == MaintenanceEventModel.id,
            NotificationReadModel.notification_type == notification_type.value,
            NotificationReadModel.account_id == account_id,
        )

    async def list_feed(
        self,
        account_id: int,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> Sequence[EventFeedRow]:
        stmt = (
            select(
                MaintenanceEventModel.id,
                MaintenanceEventModel.ticket_id,
                MaintenanceEventModel.event_type,
                MaintenanceEventModel.created_at,
                MaintenanceTicketModel.title.label("ticket_title"),
                MaintenanceStatusModel.name.label("status_name"),
                MaintenancePriorityModel.name.label("priority_name"),
                AccountModel.first_name,
                AccountModel.last_name,
                AccountModel.username,
                NotificationReadModel.id.label("marker_id"),
            )
            .select_from(MaintenanceEventModel)
            .join(MaintenanceTicketModel, MaintenanceTicketModel.id == MaintenanceEventModel.ticket_id)
            .outerjoin(MaintenanceStatusModel, MaintenanceStatusModel.id == MaintenanceTicketModel.status_id)
            .outerjoin(MaintenancePriorityModel, MaintenancePriorityModel.id == MaintenanceTicketModel.priority_id)
            .outerjoin(AccountModel, AccountModel.id == MaintenanceEventModel.actor_id)
            .outerjoin(NotificationReadModel, self._marker_join(account_id, NotificationType.MAINTENANCE))
        )
        if unread_only:
            stmt = stmt.where(NotificationReadModel.id.is_(None))
        stmt = (
            stmt.order_by(MaintenanceEventModel.created_at.desc(), MaintenanceEventModel.id.desc())
            .limit(limit)
            .offset(offset)
        )

        result = await self._session.execute(stmt)
        rows = []
        for row in result.all():
            full_name = " ".join(p for p in (row.first_name, row.last_name) if p).strip()
            rows.append(EventFeedRow(
                id=row.id,
                ticket_id=row.ticket_id,
                event_type=row.event_type,
                created_at=row.created_at,
                ticket_title=row.ticket_title,
                status_name=row.status_name,
                priority_name=row.priority_name,
                actor_name=full_name or None,
                actor_username=row.username,
                read=row.marker_id is not None,
            ))
        return rows

    async def source_exists(self, notification_type: NotificationType, notification_id: int) -> bool:
        result = await self._session.execute(
            select(MaintenanceEventModel.id).where(MaintenanceEventModel.id == notification_id)
        )
        return result.scalar_one_or_none() is not None

    async def mark_read(self, account_id: int, notification_type: NotificationType, notification_id: int) -> None:
        stmt = self._insert().values(
            account_id=account_id,
            notification_type=notification_type.value,
            notification_id=notification_id,
        ).on_conflict_do_nothing(index_elements=_MARKER_KEY)
        await self._session.execute(stmt)

    async def mark_all_read(self, account_id: int, notification_type: NotificationType) -> int:
        # Um único snapshot do log: INSERT … SELECT com anti-join nos marcadores
        unread = (
            select(
                literal(account_id, Integer),
                literal(notification_type.value, String),
                MaintenanceEventModel.id,
            )
            .select_from(MaintenanceEventModel)
            .outerjoin(NotificationReadModel, self._marker_join(account_id, notification_type))
            .where(NotificationReadModel.id.is_(None))
        )
        stmt = (
            self._insert()
            .from_select(_MARKER_KEY, unread)
            .on_conflict_do_nothing(index_elements=_MARKER_KEY)
        )
        result = await self._session.execute(stmt)
        return max(result.rowcount or 0, 0)
