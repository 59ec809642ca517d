"""
Endpoints de Manutenção — /api/v1/maintenance

Criação, transições da state machine, observações, anexos e trilha de
eventos. As rotas que aceitam anexo recebem multipart/form-data.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from sibol.application.dtos.maintenance_dtos import (
    AcceptTicketCommand,
    AddRemarksCommand,
    BindAttachmentCommand,
    CreateTicketCommand,
    GetTicketByIdQuery,
    ListTicketsQuery,
    TicketActionCommand,
    TicketResult,
)
from sibol.application.shared.unit_of_work import UnitOfWork
from sibol.application.systems.maintenance.attachment_binder import AttachmentBinder
from sibol.application.systems.maintenance.use_cases import (
    AcceptAndAssignUseCase,
    AddRemarksUseCase,
    CancelTicketUseCase,
    CreateTicketUseCase,
    GetTicketUseCase,
    ListPrioritiesUseCase,
    ListTicketAttachmentsUseCase,
    ListTicketEventsUseCase,
    ListTicketsUseCase,
    MarkForVerificationUseCase,
    MarkOnGoingUseCase,
    UploadAttachmentUseCase,
    VerifyCompletionUseCase,
)
from sibol.domain.shared.value_objects import AttachmentRef
from sibol.domain.systems.accounts.entity import Actor
from sibol.infrastructure.config import get_settings
from sibol.infrastructure.services.file_storage import FileStorageService
from sibol.infrastructure.systems.accounts.repository import AccountRepository
from sibol.infrastructure.systems.catalog.repository import CatalogRepository
from sibol.infrastructure.systems.maintenance.repository import (
    MaintenanceEventLogRepository,
    TicketRepository,
)
from sibol.presentation.api.v1.deps import (
    get_account_repo,
    get_catalog_repo,
    get_current_actor,
    get_event_log,
    get_ticket_repo,
    get_uow,
)
from sibol.presentation.api.v1.schemas import (
    AttachmentOut,
    ErrorResponse,
    PriorityOut,
    TicketHistoryOut,
    TicketOut,
)

router = APIRouter()
settings = get_settings()

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def get_file_storage() -> FileStorageService:
    return FileStorageService()


def _binder(repo: TicketRepository) -> AttachmentBinder:
    return AttachmentBinder(repo, settings.DEFAULT_ATTACHMENT_FOLDER)


def _to_out(r: TicketResult) -> TicketOut:
    return TicketOut.model_validate(asdict(r))


async def _store(storage: FileStorageService, file: Optional[UploadFile], folder: Optional[str]) -> Optional[AttachmentRef]:
    # Campo de arquivo vazio no form chega como UploadFile sem nome
    if file is None or not file.filename:
        return None
    return await storage.save(file, folder)


def _discard(storage: FileStorageService, ref: Optional[AttachmentRef]) -> None:
    # Pedido recusado: nenhum registro aponta para o arquivo gravado
    if ref is not None:
        storage.delete(ref.file_path)


# ════════════════════════════════════════════════════════════════
# CRIAÇÃO E CONSULTAS
# ════════════════════════════════════════════════════════════════

@router.post(
    "/",
    response_model=TicketOut,
    status_code=status.HTTP_201_CREATED,
    summary="Abrir solicitação de manutenção",
    responses=_ERRORS,
)
async def create_ticket(
    title: str = Form(..., max_length=255),
    details: Optional[str] = Form(None),
    priority: Optional[str] = Form(None, description="Critical | Urgent | Mild"),
    due_date: Optional[date] = Form(None),
    folder: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    repo: TicketRepository = Depends(get_ticket_repo),
    catalog: CatalogRepository = Depends(get_catalog_repo),
    uow: UnitOfWork = Depends(get_uow),
    storage: FileStorageService = Depends(get_file_storage),
    actor: Actor = Depends(get_current_actor),
):
    ref = await _store(storage, attachment, folder)
    uc = CreateTicketUseCase(repo, catalog, uow, _binder(repo))
    try:
        result = await uc.execute(
            CreateTicketCommand(
                title=title,
                details=details,
                priority=priority,
                due_date=due_date,
                attachment=ref,
            ),
            actor,
        )
    except Exception:
        _discard(storage, ref)
        raise
    return _to_out(result)


@router.get(
    "/",
    response_model=list[TicketOut],
    summary="Listar tickets com filtros",
    description="`status` aceita rótulos separados por vírgula, ex.: `Requested,On-going`.",
    responses=_ERRORS,
)
async def list_tickets(
    ticket_status: Optional[str] = Query(default=None, alias="status"),
    assigned_to: Optional[int] = Query(default=None),
    created_by: Optional[int] = Query(default=None),
    repo: TicketRepository = Depends(get_ticket_repo),
    catalog: CatalogRepository = Depends(get_catalog_repo),
    _actor: Actor = Depends(get_current_actor),
):
    results = await ListTicketsUseCase(repo, catalog).execute(
        ListTicketsQuery(status=ticket_status, assigned_to=assigned_to, created_by=created_by)
    )
    return [_to_out(r) for r in results]


@router.get(
    "/priorities",
    response_model=list[PriorityOut],
    summary="Listar prioridades do catálogo",
)
async def list_priorities(
    catalog: CatalogRepository = Depends(get_catalog_repo),
    _actor: Actor = Depends(get_current_actor),
):
    entries = await ListPrioritiesUseCase(catalog).execute()
    return [PriorityOut(id=e.id, name=e.name) for e in entries]


@router.get(
    "/{ticket_id}",
    response_model=TicketOut,
    summary="Buscar ticket por ID (com anexos)",
    responses=_ERRORS,
)
async def get_ticket(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    _actor: Actor = Depends(get_current_actor),
):
    result = await GetTicketUseCase(repo).execute(GetTicketByIdQuery(ticket_id=ticket_id))
    return _to_out(result)


@router.get(
    "/{ticket_id}/events",
    response_model=TicketHistoryOut,
    summary="Trilha de eventos do ticket",
    responses=_ERRORS,
)
async def list_ticket_events(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    event_log: MaintenanceEventLogRepository = Depends(get_event_log),
    _actor: Actor = Depends(get_current_actor),
):
    result = await ListTicketEventsUseCase(repo, event_log).execute(GetTicketByIdQuery(ticket_id=ticket_id))
    return TicketHistoryOut.model_validate(asdict(result))


# ════════════════════════════════════════════════════════════════
# STATE MACHINE
# ════════════════════════════════════════════════════════════════

@router.put(
    "/{ticket_id}/accept",
    response_model=TicketOut,
    summary="Aceitar e atribuir a um operador (staff/admin)",
    responses=_ERRORS,
)
async def accept_ticket(
    ticket_id: int,
    assign_to: int = Form(...),
    due_date: Optional[date] = Form(None),
    priority: Optional[str] = Form(None),
    folder: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    repo: TicketRepository = Depends(get_ticket_repo),
    accounts: AccountRepository = Depends(get_account_repo),
    catalog: CatalogRepository = Depends(get_catalog_repo),
    uow: UnitOfWork = Depends(get_uow),
    storage: FileStorageService = Depends(get_file_storage),
    actor: Actor = Depends(get_current_actor),
):
    ref = await _store(storage, attachment, folder)
    uc = AcceptAndAssignUseCase(repo, accounts, catalog, uow, _binder(repo))
    try:
        result = await uc.execute(
            AcceptTicketCommand(
                ticket_id=ticket_id,
                assign_to=assign_to,
                due_date=due_date,
                priority=priority,
                attachment=ref,
            ),
            actor,
        )
    except Exception:
        _discard(storage, ref)
        raise
    return _to_out(result)


@router.put(
    "/{ticket_id}/ongoing",
    response_model=TicketOut,
    summary="Operador confirma que está trabalhando no ticket",
    responses=_ERRORS,
)
async def mark_ongoing(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    result = await MarkOnGoingUseCase(repo, uow).execute(TicketActionCommand(ticket_id=ticket_id), actor)
    return _to_out(result)


@router.put(
    "/{ticket_id}/for-verification",
    response_model=TicketOut,
    summary="Operador envia o ticket para verificação",
    responses=_ERRORS,
)
async def mark_for_verification(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    result = await MarkForVerificationUseCase(repo, uow).execute(TicketActionCommand(ticket_id=ticket_id), actor)
    return _to_out(result)


@router.put(
    "/{ticket_id}/verify",
    response_model=TicketOut,
    summary="Staff/admin confirma a conclusão",
    responses=_ERRORS,
)
async def verify_completion(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    uc = VerifyCompletionUseCase(repo, uow, strict=settings.STRICT_COMPLETION_VERIFICATION)
    return _to_out(await uc.execute(TicketActionCommand(ticket_id=ticket_id), actor))


@router.put(
    "/{ticket_id}/cancel",
    response_model=TicketOut,
    summary="Cancelar ticket (criador ou staff/admin)",
    responses=_ERRORS,
)
async def cancel_ticket(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    actor: Actor = Depends(get_current_actor),
):
    result = await CancelTicketUseCase(repo, uow).execute(TicketActionCommand(ticket_id=ticket_id), actor)
    return _to_out(result)


# ════════════════════════════════════════════════════════════════
# OBSERVAÇÕES E ANEXOS
# ════════════════════════════════════════════════════════════════

@router.put(
    "/{ticket_id}/remarks",
    response_model=TicketOut,
    summary="Adicionar observação (não altera o status)",
    responses=_ERRORS,
)
async def add_remarks(
    ticket_id: int,
    remarks: str = Form(...),
    folder: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    storage: FileStorageService = Depends(get_file_storage),
    actor: Actor = Depends(get_current_actor),
):
    ref = await _store(storage, attachment, folder)
    uc = AddRemarksUseCase(repo, uow, _binder(repo))
    try:
        result = await uc.execute(
            AddRemarksCommand(ticket_id=ticket_id, remarks=remarks, attachment=ref),
            actor,
        )
    except Exception:
        _discard(storage, ref)
        raise
    return _to_out(result)


@router.post(
    "/{ticket_id}/attachments",
    response_model=AttachmentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload de anexo avulso ao ticket",
    description="Tipos aceitos e tamanho máximo vêm das configurações (ALLOWED_CONTENT_TYPES, MAX_FILE_SIZE_MB).",
    responses=_ERRORS,
)
async def upload_attachment(
    ticket_id: int,
    file: UploadFile = File(...),
    folder: Optional[str] = Form(None),
    repo: TicketRepository = Depends(get_ticket_repo),
    uow: UnitOfWork = Depends(get_uow),
    storage: FileStorageService = Depends(get_file_storage),
    actor: Actor = Depends(get_current_actor),
):
    ref = await storage.save(file, folder)
    uc = UploadAttachmentUseCase(repo, uow, _binder(repo))
    try:
        result = await uc.execute(
            BindAttachmentCommand(ticket_id=ticket_id, uploaded_by=actor.account_id, attachment=ref),
            actor,
        )
    except Exception:
        _discard(storage, ref)
        raise
    return AttachmentOut.model_validate(asdict(result))


@router.get(
    "/{ticket_id}/attachments",
    response_model=list[AttachmentOut],
    summary="Listar anexos do ticket",
    responses=_ERRORS,
)
async def list_attachments(
    ticket_id: int,
    repo: TicketRepository = Depends(get_ticket_repo),
    _actor: Actor = Depends(get_current_actor),
):
    results = await ListTicketAttachmentsUseCase(repo).execute(GetTicketByIdQuery(ticket_id=ticket_id))
    return [AttachmentOut.model_validate(asdict(r)) for r in results]
