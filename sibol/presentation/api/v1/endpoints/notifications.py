"""
Endpoints de Notificações — /api/v1/notifications

Feed derivado do log de eventos de manutenção + marcadores de leitura.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from sibol.application.dtos.notification_dtos import (
    DEFAULT_PAGE_SIZE,
    ListNotificationsQuery,
    MarkAllReadCommand,
    MarkReadCommand,
)
from sibol.application.shared.unit_of_work import UnitOfWork
from sibol.application.systems.notifications.use_cases import (
    ListNotificationsUseCase,
    MarkAllNotificationsReadUseCase,
    MarkNotificationReadUseCase,
)
from sibol.domain.systems.accounts.entity import Actor
from sibol.infrastructure.systems.notifications.repository import NotificationRepository
from sibol.presentation.api.v1.deps import get_current_actor, get_notification_repo, get_uow
from sibol.presentation.api.v1.schemas import (
    ErrorResponse,
    MarkAllReadRequest,
    MarkReadOut,
    MarkReadRequest,
    NotificationOut,
)

router = APIRouter()


@router.get(
    "/",
    response_model=list[NotificationOut],
    summary="Feed de notificações do usuário",
    description="Mais recentes primeiro. `limit` é limitado a 1..200.",
    responses={400: {"model": ErrorResponse}},
)
async def list_notifications(
    type: str = Query(default="all", description="all | maintenance"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    offset: int = Query(default=0),
    unread_only: bool = Query(default=False),
    repo: NotificationRepository = Depends(get_notification_repo),
    actor: Actor = Depends(get_current_actor),
):
    results = await ListNotificationsUseCase(repo).execute(
        ListNotificationsQuery(type=type, limit=limit, offset=offset, unread_only=unread_only),
        actor,
    )
    return [NotificationOut.model_validate(asdict(r)) for r in results]


@router.post(
    "/read",
    response_model=MarkReadOut,
    summary="Marcar uma notificação como lida",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def mark_read(
    payload: MarkReadRequest,
    repo: NotificationRepository = Depends(get_notification_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    result = await MarkNotificationReadUseCase(repo, uow).execute(
        MarkReadCommand(type=payload.type, id=payload.id), actor,
    )
    return MarkReadOut(success=result.success, marked=result.marked)


@router.post(
    "/read-all",
    response_model=MarkReadOut,
    summary="Marcar todas as notificações como lidas",
    responses={400: {"model": ErrorResponse}},
)
async def mark_all_read(
    payload: MarkAllReadRequest,
    repo: NotificationRepository = Depends(get_notification_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    result = await MarkAllNotificationsReadUseCase(repo, uow).execute(
        MarkAllReadCommand(type=payload.type), actor,
    )
    return MarkReadOut(success=result.success, marked=result.marked)
