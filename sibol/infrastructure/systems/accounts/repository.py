"""Implementação concreta do repositório de contas — SQLAlchemy."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.domain.systems.accounts.entity import Account, Role
from sibol.domain.systems.accounts.repository import IAccountRepository
from sibol.infrastructure.database.models import AccountModel


class AccountRepository(IAccountRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_entity(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            username=model.username,
            first_name=model.first_name or "",
            last_name=model.last_name or "",
            role=Role(model.role),
            is_active=model.is_active,
            created_at=model.created_at,
        )

    async def get_by_id(self, account_id: int) -> Optional[Account]:
        model = await self._session.get(AccountModel, account_id)
        return self._to_entity(model) if model else None

    async def get_by_username(self, username: str) -> Optional[Account]:
        result = await self._session.execute(
            select(AccountModel).where(AccountModel.username == username)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, account: Account) -> Account:
        model = AccountModel(
            username=account.username,
            first_name=account.first_name,
            last_name=account.last_name,
            role=int(account.role),
            is_active=account.is_active,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)
