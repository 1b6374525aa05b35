#!/usr/bin/env python3
"""
Standalone script to seed a Spendwise database.

Creates a demo user (with the usual per-user default categories) and,
with --shared, the global default categories visible to every user.
Usage: python seed_data.py [--shared]
"""

import asyncio
import sys
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from fastapi_users import exceptions
from fastapi_users.db import SQLAlchemyUserDatabase
from spendwise.core.config import settings
from spendwise.core.auth import User, UserManager, UserCreate
from spendwise.crud.category import DEFAULT_CATEGORIES
from spendwise.models.category import Category

async def seed_shared_categories(session) -> int:
    result = await session.execute(select(Category.name).where(Category.user_id.is_(None)))
    existing = {name.lower() for name in result.scalars().all()}
    created = 0
    for data in DEFAULT_CATEGORIES:
        if data["name"].lower() in existing:
            continue
        session.add(Category(**data, user_id=None, is_default=True))
        created += 1
    await session.commit()
    return created

async def seed(shared: bool = False):
    print("Seeding database...")

    email = input("Enter demo user email: ") or "demo@spendwise.io"
    password = input("Enter demo user password: ") or "Demo1234"
    name = input("Enter name: ") or "Demo User"

    engine = create_async_engine(settings.DATABASE_URL)
    async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session_maker() as session:
        try:
            if shared:
                created = await seed_shared_categories(session)
                print(f"✅ {created} shared default categories created")

            user_db = SQLAlchemyUserDatabase(session, User)
            user_manager = UserManager(user_db)

            try:
                await user_manager.get_by_email(email)
                print(f"User with email {email} already exists!")
                return
            except exceptions.UserNotExists:
                pass

            user = await user_manager.create(UserCreate(email=email, password=password, name=name))
            print(f"✅ Demo user created successfully!")
            print(f"📧 Email: {user.email}")
            print(f"👤 Name: {user.name}")
            print(f"🔑 ID: {user.id}")
        finally:
            await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed(shared="--shared" in sys.argv[1:]))
