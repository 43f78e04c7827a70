"""
Database session configuration.

Builds the async engine from ``DATABASE_URL``. Production runs on
PostgreSQL through asyncpg; a ``sqlite+aiosqlite`` URL works for local
runs and the test suite.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from zap_shift.app.core.config import settings


def engine_options(database_url: str) -> dict:
    """Connection pool sizing applies to server databases only."""
    options = {"echo": settings.db_echo}
    if make_url(database_url).get_backend_name() != "sqlite":
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

# Objects stay readable after commit; flushes happen on commit only
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency yielding one session per request.

    Anything the handler did not commit is rolled back when the session closes.
    """
    async with AsyncSessionLocal() as session:
        yield session
