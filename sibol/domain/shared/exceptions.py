"""
Taxonomia de erros de domínio.

Cada classe corresponde a uma família de status HTTP; o mapeamento fica
em presentation/middleware/exception_handlers.py. Nenhuma delas é
re-tentada automaticamente.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base de todos os erros de domínio."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Entrada malformada ou ausente (400)."""
    pass


class NotFoundError(DomainError):
    """Entidade referenciada não existe (404)."""

    def __init__(self, resource: str = "Recurso", resource_id: int | str = "") -> None:
        self.resource = resource
        self.resource_id = resource_id
        label = f"{resource} {resource_id}" if resource_id != "" else resource
        super().__init__(f"{label} não encontrado")


class ForbiddenError(DomainError):
    """Papel ou vínculo do ator não permite a operação (403)."""
    pass


class ConflictError(DomainError):
    """Transição não permitida a partir do status atual (409)."""
    pass


class StorageError(DomainError):
    """Falha opaca da camada de persistência (500)."""
    pass
