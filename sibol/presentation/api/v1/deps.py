"""
Borda de identidade e factories de DI.

O token bearer é emitido pelo provedor de identidade (fora deste serviço);
aqui só validamos assinatura/expiração e resolvemos o ``Actor`` (conta +
papel tipado) uma única vez por request.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.application.shared.unit_of_work import UnitOfWork
from sibol.domain.systems.accounts.entity import Actor
from sibol.infrastructure.config import get_settings
from sibol.infrastructure.database import get_db
from sibol.infrastructure.systems.accounts.repository import AccountRepository
from sibol.infrastructure.systems.catalog.repository import CatalogRepository
from sibol.infrastructure.systems.maintenance.repository import (
    MaintenanceEventLogRepository,
    TicketRepository,
)
from sibol.infrastructure.systems.notifications.repository import NotificationRepository

settings = get_settings()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


# ════════════════════════════════════════════════════════════════
# JWT
# ════════════════════════════════════════════════════════════════

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Usado pelo seed e pelos testes; em produção o token vem do provedor."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decodifica e valida um token JWT. Raises JWTError."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


# ════════════════════════════════════════════════════════════════
# FASTAPI DEPENDENCIES
# ════════════════════════════════════════════════════════════════

async def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """Extrai a conta do access token e devolve o ator com papel tipado."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token inválido ou expirado",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise credentials_exception
        account_id = int(payload.get("sub", 0))
        if not account_id:
            raise credentials_exception
    except (JWTError, ValueError):
        raise credentials_exception

    account = await AccountRepository(db).get_by_id(account_id)
    if account is None:
        raise credentials_exception
    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Conta inativa")
    return account.as_actor()


# ════════════════════════════════════════════════════════════════
# DI FACTORIES — Repositórios e UoW
# ════════════════════════════════════════════════════════════════

def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db, MaintenanceEventLogRepository(db))


def get_catalog_repo(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    return CatalogRepository(db)


def get_ticket_repo(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogRepository = Depends(get_catalog_repo),
) -> TicketRepository:
    return TicketRepository(db, catalog)


def get_event_log(db: AsyncSession = Depends(get_db)) -> MaintenanceEventLogRepository:
    return MaintenanceEventLogRepository(db)


def get_account_repo(db: AsyncSession = Depends(get_db)) -> AccountRepository:
    return AccountRepository(db)


def get_notification_repo(db: AsyncSession = Depends(get_db)) -> NotificationRepository:
    return NotificationRepository(db)
