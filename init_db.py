"""
Скрипт для инициализации базы данных.

Создаёт все таблицы напрямую через SQLAlchemy и, если задан ADMIN_EMAIL,
создаёт администратора и печатает его API ключ.

Запуск:
    ADMIN_EMAIL=admin@example.com python init_db.py
"""

import asyncio

from taskflow.core.config import settings
from taskflow.core.database import AsyncSessionLocal, init_db
from taskflow.repositories import UserRepository
from taskflow.services import UserService


async def create_admin(email: str) -> None:
    """Создать администратора (если пользователя с таким email ещё нет)."""
    async with AsyncSessionLocal() as session:
        existing = await UserRepository(session).get_by_email(email)
        if existing:
            print(f"• Пользователь {email} уже существует (admin={existing.is_admin})")
            return

        admin = await UserService(session).register(name="Admin", email=email, is_admin=True)
        await session.commit()
        print(f"✓ Администратор создан: {admin.email}")
        print(f"  X-API-Key: {admin.api_key}")


async def main():
    """Создать все таблицы и администратора."""
    print("Создание таблиц...")
    await init_db()
    print("✓ Таблицы созданы успешно!")

    if settings.ADMIN_EMAIL:
        await create_admin(settings.ADMIN_EMAIL)


if __name__ == "__main__":
    asyncio.run(main())
