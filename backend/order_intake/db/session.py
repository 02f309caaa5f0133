"""Database engine configuration."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from order_intake.config import settings
from order_intake.db.gateway import StorageGateway


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Create the shared async engine on first use.

    Created lazily so importing the application does not require the
    database driver to be installed (tests run against SQLite).
    """
    return create_async_engine(
        settings.database_url,
        echo=False,  # SQL logging controlled via structlog configuration
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=300,  # Recycle connections after 5 minutes
    )


async def dispose_engine() -> None:
    """Dispose of the engine and release all connections.

    Should be called during application shutdown.
    """
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_engine.cache_clear()


def get_gateway() -> StorageGateway:
    """Dependency that provides a storage gateway over the shared engine."""
    return StorageGateway(get_engine())
