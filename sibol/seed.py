"""
Seed script — catálogo de status/prioridades e conta admin inicial.

Uso:
    python -m sibol.seed

Idempotente: só insere o que ainda não existe. Imprime um access token
de desenvolvimento para a conta admin.
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sibol.domain.systems.accounts.entity import Account, Role
from sibol.domain.systems.maintenance.workflow import TicketStatus
from sibol.infrastructure.database.models import MaintenancePriorityModel, MaintenanceStatusModel
from sibol.infrastructure.database.session import AsyncSessionLocal
from sibol.infrastructure.systems.accounts.repository import AccountRepository
from sibol.presentation.api.v1.deps import create_access_token

PRIORITIES = ["Critical", "Urgent", "Mild"]

ADMIN_USERNAME = "admin"
ADMIN_FIRST_NAME = "Barangay"
ADMIN_LAST_NAME = "Admin"


async def seed_catalog(session: AsyncSession) -> int:
    """Insere status e prioridades ausentes. Retorna quantos foram criados."""
    created = 0
    for model, names in (
        (MaintenanceStatusModel, [s.value for s in TicketStatus]),
        (MaintenancePriorityModel, PRIORITIES),
    ):
        result = await session.execute(select(model.name))
        existing = set(result.scalars().all())
        for name in names:
            if name not in existing:
                session.add(model(name=name))
                created += 1
    await session.flush()
    return created


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        created = await seed_catalog(session)
        print(f"✅ Catálogo: {created} registro(s) criado(s)")

        repo = AccountRepository(session)
        admin = await repo.get_by_username(ADMIN_USERNAME)
        if admin:
            print(f"ℹ️  Admin '{ADMIN_USERNAME}' já existe (id={admin.id}).")
        else:
            admin = await repo.create(Account(
                username=ADMIN_USERNAME,
                first_name=ADMIN_FIRST_NAME,
                last_name=ADMIN_LAST_NAME,
                role=Role.ADMIN,
            ))
            print(f"✅ Admin criado: {ADMIN_USERNAME} (id={admin.id})")
        await session.commit()

    token = create_access_token({"sub": str(admin.id)})
    print(f"\n🔑 Token de desenvolvimento:\n{token}")
    print(f"\n⚠️  Em produção os tokens vêm do provedor de identidade!")


def main():
    asyncio.run(seed())


if __name__ == "__main__":
    main()
