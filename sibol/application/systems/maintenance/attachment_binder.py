"""
Attachment Binder — associa uma referência de arquivo a um ticket e,
opcionalmente, ao evento em que foi enviada (criação, aceite, observação).

Não lê nem transforma bytes: validação de tipo/tamanho é do storage.
Não faz commit — roda dentro da transação de quem chama.
"""

from __future__ import annotations

import logging

from sibol.application.dtos.maintenance_dtos import BindAttachmentCommand
from sibol.domain.shared.exceptions import NotFoundError
from sibol.domain.shared.value_objects import normalize_attachment_folder
from sibol.domain.systems.maintenance.entity import TicketAttachment
from sibol.domain.systems.maintenance.repository import ITicketRepository

logger = logging.getLogger(__name__)


class AttachmentBinder:
    def __init__(self, repo: ITicketRepository, default_folder: str = "maintenance") -> None:
        self._repo = repo
        self._default_folder = default_folder

    async def bind(self, cmd: BindAttachmentCommand, *, ticket_known: bool = False) -> TicketAttachment:
        """ticket_known=True pula a checagem de existência (ticket já travado pelo chamador)."""
        if not ticket_known and not await self._repo.exists(cmd.ticket_id):
            raise NotFoundError("Ticket", cmd.ticket_id)

        ref = cmd.attachment
        attachment = TicketAttachment(
            ticket_id=cmd.ticket_id,
            event_id=cmd.event_id,
            uploaded_by=cmd.uploaded_by,
            file_path=ref.file_path,
            file_name=ref.file_name,
            file_type=ref.file_type,
            file_size=ref.file_size,
            folder=normalize_attachment_folder(ref.folder, self._default_folder),
        )
        created = await self._repo.add_attachment(attachment)
        logger.info(
            "Attachment %s bound to ticket %s (event=%s)", created.id, cmd.ticket_id, cmd.event_id,
        )
        return created
