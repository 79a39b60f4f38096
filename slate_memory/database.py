"""Postgres engine for the agent stores.

The API lifespan calls `init_database()` once and `dispose_database()` on
shutdown. Both stores share the returned session factory.
"""

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from slate_config.settings import Settings
from slate_obs.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine from settings. Only the asyncpg driver is accepted."""
    url = make_url(settings.DATABASE_URL)
    if url.drivername != "postgresql+asyncpg":
        raise ValueError(f"DATABASE_URL must use postgresql+asyncpg, got {url.drivername}")

    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=5,
        pool_recycle=1800,
    )


def init_database(settings: Settings) -> async_sessionmaker[AsyncSession]:
    global _engine, _session_factory

    if _session_factory is None:
        _engine = build_engine(settings)
        _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("database_initialized", host=_engine.url.host, database=_engine.url.database)
    return _session_factory


async def dispose_database() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("database_disposed")
    _engine = None
    _session_factory = None


async def check_db_connection() -> bool:
    """Run `SELECT 1`. False when the engine was never initialized; raises on connection errors."""
    if _engine is None:
        return False
    async with _engine.connect() as conn:
        result = await conn.execute(text("SELECT 1"))
        return result.scalar() == 1
