"""
Event handlers pós-commit — trilha de auditoria no log da aplicação.

Registrados na inicialização da app (sibol/main.py). São side-effects
best-effort: o evento já está no log de eventos do banco.
"""

from __future__ import annotations

import logging

from sibol.domain.events.maintenance_events import (
    MaintenanceEvent,
    RemarkAdded,
    TicketCancelled,
    TicketReassigned,
)

logger = logging.getLogger("sibol.audit")


async def handle_maintenance_event(event: MaintenanceEvent) -> None:
    logger.info(
        "Audit: ticket %s %s by account %s",
        event.ticket_id,
        event.event_type.value,
        event.actor_id,
    )


async def handle_ticket_reassigned(event: TicketReassigned) -> None:
    logger.info(
        "Audit: ticket %s reassigned %s→%s",
        event.ticket_id, event.old_assignee, event.new_assignee,
    )


async def handle_ticket_cancelled(event: TicketCancelled) -> None:
    logger.info("Audit: ticket %s cancelled from '%s'", event.ticket_id, event.previous_status)


async def handle_remark_added(event: RemarkAdded) -> None:
    logger.debug("Audit: ticket %s remark (%d chars)", event.ticket_id, len(event.remark))


def register_all_handlers() -> None:
    """Registra os handlers de auditoria no dispatcher."""
    from sibol.application.shared.event_dispatcher import register_handler

    register_handler(MaintenanceEvent, handle_maintenance_event)
    register_handler(TicketReassigned, handle_ticket_reassigned)
    register_handler(TicketCancelled, handle_ticket_cancelled)
    register_handler(RemarkAdded, handle_remark_added)

    logger.info("Audit event handlers registered")
