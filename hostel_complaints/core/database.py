"""
Complaint store: async engine, request sessions and schema bootstrap

Production runs on PostgreSQL (asyncpg); the test-suite points
DATABASE_URL at a SQLite file through aiosqlite.
"""
import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from hostel_complaints.core.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    # SQLite has no connection pool to size
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


async_engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Loaded complaints stay readable after commit so responses can be built from them
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request, committed when the endpoint returns cleanly"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back request session")
            await session.rollback()
            raise


async def init_db():
    """Create the users and complaints tables if they are missing"""
    import hostel_complaints.models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def close_db():
    await async_engine.dispose()
