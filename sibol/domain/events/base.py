"""
Sistema de eventos de domínio.

Agregados registram eventos; a camada de aplicação os coleta, grava no
log de eventos dentro da mesma transação e, após o commit, despacha para
handlers (audit log, side-effects best-effort).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from sibol.domain.shared.value_objects import utcnow


@dataclass(frozen=True)
class DomainEvent:
    """Classe base para todos os eventos de domínio."""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=utcnow)

    @property
    def event_name(self) -> str:
        return self.__class__.__name__


class AggregateRoot:
    """
    Mixin para entidades que disparam eventos de domínio.
    Coleta eventos em _events; a camada de aplicação chama collect_events()
    antes do commit para persistir e despachar.
    """

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []

    def _record_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    def collect_events(self) -> list[DomainEvent]:
        events = self._events.copy()
        self._events.clear()
        return events
