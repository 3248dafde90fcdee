"""
Database engines and session management
Requests use the async engine; Celery tasks use the sync one
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Dict, Generator
import logging

from .config import settings

logger = logging.getLogger(__name__)

is_sqlite = settings.DATABASE_URL.startswith("sqlite")

def engine_options() -> Dict[str, Any]:
    """Pool settings per backend; SQLite gets no pool at all"""
    options: Dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if is_sqlite:
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    return options

engine = create_async_engine(settings.database_url_async, **engine_options())
sync_engine = create_engine(settings.DATABASE_URL, **engine_options())

# Loaded attributes stay usable after commit, services re-read with populate_existing
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

SessionLocal = sessionmaker(sync_engine, autoflush=False, expire_on_commit=False)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; services commit explicitly"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Session for work outside a request, such as event handlers"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

@contextmanager
def get_db_sync_context() -> Generator[Session, None, None]:
    """Synchronous session for Celery tasks"""
    with SessionLocal() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

async def init_db() -> None:
    """Create any missing tables"""
    from shopfront.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")

async def close_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
