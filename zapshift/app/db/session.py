"""
Database engine and sessions.

One async engine per process. Pool checkout and statement timeouts are
bounded so a stalled store surfaces as an error instead of a hung request.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from zapshift.app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_pre_ping=True,
    connect_args={
        # asyncpg: connect timeout and per-statement timeout
        "timeout": settings.db_command_timeout,
        "command_timeout": settings.db_command_timeout,
    },
)

# Objects stay readable after commit; services refresh explicitly
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    FastAPI caches it per request, so guards and services see one session.
    """
    async with AsyncSessionLocal() as session:
        yield session
