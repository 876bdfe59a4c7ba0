# scripts/create_admin.py
import sys, asyncio
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from getpass import getpass
from sqlalchemy import select

from proclass.db.base import Base
from proclass.db.session import AsyncSessionLocal, engine
from proclass.modules.users.models import User, ROLE_ADMIN
from proclass.core.security import hash_password
import proclass.main  # noqa: F401  (registra as tabelas)


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        name = input("Admin nome: ").strip() or "Administrador"
        email = input("Admin email: ").strip().lower()
        password = getpass("Admin password: ")
        if len(password) < 6:
            print("Senha precisa ter pelo menos 6 caracteres")
            return

        exists = await db.execute(select(User).where(User.email == email))
        if exists.scalar_one_or_none():
            print("User already exists")
            return

        u = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=ROLE_ADMIN,
            is_active=True,
            is_exempt=True,
        )
        db.add(u)
        await db.commit()
        await db.refresh(u)
        print(f"Admin created: {u.id} ({u.email})")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
