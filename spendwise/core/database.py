# spendwise/core/database.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
import logging
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

engine_kwargs = {
    "echo": False,
    "future": True,
}

if settings.is_sqlite:
    # SQLite (local development and tests) has no server-side pool to size
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update({
        "pool_size": 5,
        "max_overflow": 5,
        "pool_timeout": 30,       # Seconds to wait for a free connection
        "pool_pre_ping": True,    # Check connection before using
        "pool_recycle": 300,      # Recycle connections after 5 minutes
    })

engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_kwargs
)


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


if settings.is_sqlite:
    # Receipt cascade and category restrict rely on the FK constraints
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    logger.info("🔧 Configured engine for SQLite (foreign keys enforced)")

# AsyncSession factory using async_sessionmaker
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# Base class for all models
Base = declarative_base()

# Dependency to get DB session with proper exception handling
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        # Log the error and rollback
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        await session.close()
        logger.debug("Database session closed")


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
