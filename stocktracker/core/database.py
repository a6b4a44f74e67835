"""Database setup with async SQLAlchemy (SQLite by default, PostgreSQL supported)."""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from stocktracker.core.config import settings
import logging
import re
import time
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

# Mask password in database URL for logging
def mask_db_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:****@', url)


def build_engine_args(database_url: str) -> dict:
    """Engine keyword arguments for the given URL.

    SQLite runs on a single file or in memory, so pool sizing only applies to
    server databases.
    """
    engine_args = {
        "echo": settings.log_level == "DEBUG",  # Log all SQL if DEBUG
    }
    if not database_url.startswith("sqlite"):
        engine_args.update({
            "pool_pre_ping": True,  # Verify connections before using
            "pool_size": 10,
            "max_overflow": 20,
            "pool_timeout": 30,
            "pool_recycle": 3600,
        })
        logger.info(
            "Configuring connection pool: pool_size=10, max_overflow=20, "
            "pool_timeout=30s, pool_recycle=3600s"
        )
    return engine_args


logger.info(f"Connecting to database: {mask_db_url(settings.database_url)}")

engine = create_async_engine(
    settings.database_url,
    **build_engine_args(settings.database_url)
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions.

    NOTE: This dependency does NOT auto-commit. Services must explicitly
    call await session.commit() when needed.
    """
    session_start_time = time.time()

    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session rolled back due to error: {str(e)}", exc_info=True)
            raise
        finally:
            duration = time.time() - session_start_time
            logger.debug(f"Database session closed (duration: {duration:.3f}s)")


async def init_db():
    """Initialize database tables."""
    # Models must be imported so their tables are registered on Base.metadata
    import stocktracker.models  # noqa: F401

    if settings.database_url.startswith("sqlite") and ":///" in settings.database_url:
        from pathlib import Path
        db_path = settings.database_url.split(":///", 1)[1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    logger.info("Initializing database tables...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database tables: {str(e)}", exc_info=True)
        logger.debug(f"Database URL (masked): {mask_db_url(settings.database_url)}")
        raise
