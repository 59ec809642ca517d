"""Entidades de contas — papel tipado e ator resolvido na borda de identidade."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sibol.domain.shared.value_objects import utcnow


class Role(enum.IntEnum):
    """Papéis fixos do provedor de identidade (inteiros estáveis)."""
    ADMIN = 1
    STAFF = 2
    OPERATOR = 3
    HOUSEHOLD = 4


@dataclass
class Account:
    id: Optional[int] = None
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    role: Role = Role.HOUSEHOLD
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def as_actor(self) -> Actor:
        return Actor(account_id=self.id, role=self.role)


@dataclass(frozen=True)
class Actor:
    """Quem está chamando o engine: resolvido uma única vez por request."""
    account_id: int
    role: Role

    def is_staff_or_admin(self) -> bool:
        return self.role in (Role.STAFF, Role.ADMIN)
