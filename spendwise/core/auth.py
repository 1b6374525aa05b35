# spendwise/core/auth.py

import re
import uuid
import logging
from datetime import datetime
from typing import Optional, Union

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin, InvalidPasswordException
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas
from pydantic import Field

from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_async_session
from .config import settings

logger = logging.getLogger(__name__)

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(length=1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    name = Column(String(length=100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    categories = relationship(
        "Category",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    expenses = relationship(
        "Expense",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    name: Optional[str] = None
    created_at: Optional[datetime] = None

class UserCreate(schemas.BaseUserCreate):
    name: str = Field(..., min_length=2, max_length=100)

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def validate_password(self, password: str, user: Union[UserCreate, User]) -> None:
        if len(password) < 8:
            raise InvalidPasswordException(reason="Password must be at least 8 characters")
        if not re.search(r"[A-Z]", password):
            raise InvalidPasswordException(reason="Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            raise InvalidPasswordException(reason="Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", password):
            raise InvalidPasswordException(reason="Password must contain at least one number")

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        # Imported here: crud.category imports the models, which need User mapped first
        from spendwise.crud.category import seed_default_categories_for_user

        logger.info(f"User {user.email} has registered. Seeding default categories…")
        created = await seed_default_categories_for_user(user.id, self.user_db.session)
        logger.info(f"Seeded {len(created)} default categories for {user.email}")

# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

# 8. Current user dependency
current_active_user = fastapi_users.current_user(active=True)

__all__ = [
    "fastapi_users",
    "auth_backend",
    "current_active_user",
    "get_user_db",
    "get_user_manager",
    "get_jwt_strategy",
    "User",
    "UserRead",
    "UserCreate",
    "UserManager",
]
