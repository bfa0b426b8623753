"""
Ledger database engine and sessions.

One AsyncSession per request. Objects stay loaded after commit so services
can return the rows they just classified or journaled.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from finledger.app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Declarative base shared by companies, accounts, transactions, rules and entries
Base = declarative_base()


async def get_db():
    """Request-scoped session dependency; nothing read through it outlives the request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
