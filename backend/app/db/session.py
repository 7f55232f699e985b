"""
Engine and per-request sessions.

One async engine (and its pool) per process. Route dependencies get a
fresh ``AsyncSession`` from ``get_db``; services receive it through their
own ``get_*_service`` dependency.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

# Objects stay readable after commit; services return them to the routes.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """Yield a session for the current request; tests override this."""
    async with AsyncSessionLocal() as session:
        yield session
