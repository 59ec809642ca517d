"""Interface (porta) do repositório de contas — camada de domínio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entity import Account


class IAccountRepository(ABC):

    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[Account]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Account]:
        ...

    @abstractmethod
    async def create(self, account: Account) -> Account:
        ...
