"""
Serviço de domínio para autorização (RBAC + vínculo com o ticket).

Regras puras, sem I/O. As regras de transição (tabela em
maintenance/workflow.py) delegam para cá.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sibol.domain.shared.exceptions import ForbiddenError
from sibol.domain.systems.accounts.entity import Actor, Role

_TICKET_CREATORS = (Role.ADMIN, Role.STAFF, Role.OPERATOR)


class AuthorizationService:
    """Regras RBAC centralizadas no domínio."""

    @staticmethod
    def ensure_role(actor: Actor, roles: Iterable[Role], action: str) -> None:
        allowed = tuple(roles)
        if actor.role not in allowed:
            names = ", ".join(r.name for r in allowed)
            raise ForbiddenError(
                f"Conta {actor.account_id} (role={actor.role.name}) não pode executar '{action}'; requer {names}"
            )

    @staticmethod
    def ensure_can_create_ticket(actor: Actor) -> None:
        AuthorizationService.ensure_role(actor, _TICKET_CREATORS, "create")

    @staticmethod
    def ensure_is_assignee(actor: Actor, assigned_to: Optional[int], roles: Iterable[Role], action: str) -> None:
        """Apenas o operador atribuído ao ticket."""
        AuthorizationService.ensure_role(actor, roles, action)
        if assigned_to is None or actor.account_id != assigned_to:
            raise ForbiddenError("Apenas o operador atribuído pode atualizar este ticket")

    @staticmethod
    def ensure_creator_or_role(actor: Actor, created_by: Optional[int], roles: Iterable[Role], action: str) -> None:
        if created_by is not None and actor.account_id == created_by:
            return
        if actor.role in tuple(roles):
            return
        raise ForbiddenError(f"Apenas o criador ou staff podem executar '{action}'")

    @staticmethod
    def ensure_can_annotate_ticket(actor: Actor, created_by: Optional[int], assigned_to: Optional[int]) -> None:
        """Criador, operador atribuído, staff ou admin podem registrar observações."""
        if actor.is_staff_or_admin():
            return
        if created_by is not None and actor.account_id == created_by:
            return
        if assigned_to is not None and actor.account_id == assigned_to:
            return
        raise ForbiddenError(
            "Apenas o criador, operador atribuído ou staff podem registrar observações neste ticket"
        )
