"""Porta do catálogo de status/prioridades (rótulo legível → id estável)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    name: str


class ICatalogRepository(ABC):

    @abstractmethod
    async def resolve_status_id(self, name: str) -> Optional[int]:
        ...

    @abstractmethod
    async def resolve_priority_id(self, name: str) -> Optional[int]:
        ...

    @abstractmethod
    async def status_names(self) -> dict[int, str]:
        ...

    @abstractmethod
    async def priority_names(self) -> dict[int, str]:
        ...

    @abstractmethod
    async def list_priorities(self) -> Sequence[CatalogEntry]:
        ...
