"""
Database engine and session management
"""
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
import structlog

from roast_storage.core.config import Settings

logger = structlog.get_logger()

# Base class for models
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine for the configured database"""
    options = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DEBUG,
    }
    if not settings.DATABASE_URL.startswith("sqlite"):
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
    return create_async_engine(settings.DATABASE_URL, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the given engine"""
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables"""
    # Register models on Base.metadata
    import roast_storage.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized")
