"""
Fixtures de teste — client HTTP + banco SQLite.

Usa SQLite async para testes rápidos sem Docker. Cada teste recebe as
tabelas recém-criadas, o catálogo semeado e uma conta por papel.
"""

from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from sibol.domain.systems.accounts.entity import Account, Role
from sibol.infrastructure.database.session import Base, get_db
from sibol.infrastructure.systems.accounts.repository import AccountRepository
from sibol.main import app
from sibol.presentation.api.v1.deps import create_access_token
from sibol.seed import seed_catalog

# ── SQLite async para testes ──
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_sibol.db"

# NullPool: cada teste roda no seu próprio event loop
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

ACCOUNTS = {
    "admin": ("admin_test", "Ana", "Reyes", Role.ADMIN, True),
    "staff": ("staff_b", "Bea", "Cruz", Role.STAFF, True),
    "operator": ("operator_a", "Carlo", "Santos", Role.OPERATOR, True),
    "operator_c": ("operator_c", "Dan", "Lim", Role.OPERATOR, True),
    "household": ("household_h", "Eva", "Garcia", Role.HOUSEHOLD, True),
    "inactive": ("inactive_i", "Ivo", "Tan", Role.STAFF, False),
}


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Override dependency
app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Cria/destrói tabelas antes/depois de cada teste."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def accounts(setup_db) -> dict[str, int]:
    """Catálogo + uma conta por papel. Retorna chave → account id."""
    ids: dict[str, int] = {}
    async with TestSessionLocal() as session:
        await seed_catalog(session)
        repo = AccountRepository(session)
        for key, (username, first, last, role, active) in ACCOUNTS.items():
            created = await repo.create(Account(
                username=username, first_name=first, last_name=last, role=role, is_active=active,
            ))
            ids[key] = created.id
        await session.commit()
    return ids


@pytest_asyncio.fixture
async def tokens(accounts: dict[str, int]) -> dict[str, str]:
    return {key: create_access_token({"sub": str(account_id)}) for key, account_id in accounts.items()}


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_ticket(client: AsyncClient, token: str, title: str = "Broken drum at Purok 3", **form) -> dict:
    resp = await client.post(
        "/api/v1/maintenance/",
        data={"title": title, **form},
        headers=auth_header(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def accept_ticket(
    client: AsyncClient,
    token: str,
    ticket_id: int,
    assign_to: int,
    due_date: Optional[str] = "2026-12-01",
    **form,
):
    data = {"assign_to": str(assign_to), **form}
    if due_date is not None:
        data["due_date"] = due_date
    return await client.put(
        f"/api/v1/maintenance/{ticket_id}/accept",
        data=data,
        headers=auth_header(token),
    )
