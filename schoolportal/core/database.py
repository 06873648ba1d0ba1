from typing import AsyncGenerator
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from schoolportal.core.config import settings
from schoolportal.models.base import Base

# Database URL from settings
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    """Pool tuning only applies to server databases; SQLite uses its own pool"""
    if url.startswith("sqlite"):
        return {"echo": settings.DATABASE_ECHO}
    return {
        "echo": settings.DATABASE_ECHO,
        "pool_pre_ping": True,        # Connection health check
        "pool_size": 20,              # Maximum number of connections in the pool
        "max_overflow": 10,           # Connections allowed beyond pool_size
        "pool_timeout": 30,           # Seconds to wait on connection pool checkout
        "pool_recycle": 1800,         # Recycle connections after 30 minutes
    }


# Create async engine
engine = create_async_engine(SQLALCHEMY_DATABASE_URL, **_engine_options(SQLALCHEMY_DATABASE_URL))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,    # Don't expire objects after commit
    autoflush=False            # Explicit flush management
)

# FastAPI dependency for database sessions
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async database session.
    Usage: db: AsyncSession = Depends(get_db)
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        # Rollback on error
        await session.rollback()
        raise
    finally:
        # Always close the session
        await session.close()

# Context manager for background tasks and scripts
@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside of request context.
    Usage: async with get_db_context() as session:
    """
    session = AsyncSessionLocal()
    try:
        yield session
        # Commit by default when used as context manager
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()

# Database initialization functions
async def init_db() -> None:
    """Initialize database tables"""
    import schoolportal.models  # noqa: F401  registers every table on Base.metadata
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
