"""
Dispatcher de eventos de domínio.

Roda depois do commit: os eventos já estão gravados no log, então um
handler que falha é apenas registrado no log e não desfaz a transação.
"""

from __future__ import annotations

import logging
from typing import Callable, Type

from sibol.domain.events.base import DomainEvent

logger = logging.getLogger(__name__)

# Registry: classe do evento → handlers
_handlers: dict[Type[DomainEvent], list[Callable]] = {}


def register_handler(event_type: Type[DomainEvent], handler: Callable) -> None:
    """Registra um handler; subclasses do tipo também são entregues a ele."""
    handlers = _handlers.setdefault(event_type, [])
    if handler not in handlers:
        handlers.append(handler)


def _handlers_for(event: DomainEvent) -> list[Callable]:
    found: list[Callable] = []
    for cls in type(event).__mro__:
        found.extend(_handlers.get(cls, []))
    return found


async def dispatch_events(events: list[DomainEvent]) -> None:
    """Entrega os eventos em ordem, cada um a todos os seus handlers."""
    for event in events:
        for handler in _handlers_for(event):
            try:
                result = handler(event)
                if hasattr(result, "__await__"):
                    await result
            except Exception:
                logger.exception(
                    "Erro ao despachar evento %s para handler %s",
                    event.event_name,
                    getattr(handler, "__name__", repr(handler)),
                )


def clear_handlers() -> None:
    """Limpa todos os handlers (útil em testes)."""
    _handlers.clear()
