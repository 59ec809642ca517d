"""
Exception handlers globais — converte a taxonomia de erros de domínio
em respostas HTTP padronizadas.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from sibol.domain.shared.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# (classe, status HTTP, código de erro), do mais específico ao mais geral
_DOMAIN_ERRORS: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "validation_error"),
    (ForbiddenError, status.HTTP_403_FORBIDDEN, "forbidden"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (ConflictError, status.HTTP_409_CONFLICT, "conflict"),
]


def _body(request: Request, error: str, detail: str) -> dict:
    return {
        "error": error,
        "detail": detail,
        "request_id": getattr(request.state, "request_id", None),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Registra todos os handlers de exceção na app FastAPI."""

    def _make_handler(status_code: int, error: str):
        async def handler(request: Request, exc: DomainError):
            return JSONResponse(status_code=status_code, content=_body(request, error, str(exc)))
        return handler

    for exc_class, status_code, error in _DOMAIN_ERRORS:
        app.add_exception_handler(exc_class, _make_handler(status_code, error))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        # Contexto completo já foi logado por quem levantou; o cliente recebe mensagem genérica
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_body(request, "storage_error", "Erro ao acessar o armazenamento"),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_body(request, "storage_error", "Erro ao acessar o armazenamento"),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_body(request, "internal_server_error", "Erro interno do servidor"),
        )
