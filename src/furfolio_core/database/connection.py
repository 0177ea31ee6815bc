"""
Database connection utilities for the furfolio-core package.

This module provides async SQLAlchemy engine configuration for PostgreSQL
(asyncpg) and SQLite (aiosqlite) databases.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from ..exceptions import DatabaseConfigException

logger = logging.getLogger(__name__)

SUPPORTED_DRIVERS = ("postgresql+asyncpg", "sqlite+aiosqlite")


class DatabaseConfig:
    """Configuration class for database connections."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        """
        Initialize database configuration.

        Args:
            database_url: PostgreSQL or SQLite connection URL
            pool_size: Number of connections to maintain in the pool
            max_overflow: Maximum number of connections that can overflow the pool
            pool_timeout: Timeout for getting connection from pool
            pool_recycle: Time in seconds to recycle connections
            echo: Whether to echo SQL statements

        Raises:
            DatabaseConfigException: If the URL is malformed or uses an
                unsupported driver
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.echo = echo

        self.async_url = self._to_async_url(database_url)
        self._validate_database_url()

    @staticmethod
    def _to_async_url(database_url: str) -> str:
        """Convert plain driver URLs to their async equivalents."""
        if database_url.startswith("postgresql://"):
            return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if database_url.startswith("sqlite://"):
            return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return database_url

    def _validate_database_url(self) -> None:
        try:
            url = make_url(self.async_url)
        except ArgumentError as e:
            raise DatabaseConfigException(
                f"Invalid database URL: {e}",
                config_key="database_url",
                config_value=DatabaseConfigException.sanitize_url(self.database_url),
            )

        if url.drivername not in SUPPORTED_DRIVERS:
            raise DatabaseConfigException(
                f"Unsupported database driver '{url.drivername}'",
                config_key="database_url",
                config_value=DatabaseConfigException.sanitize_url(self.database_url),
            )
        if url.drivername.startswith("postgresql"):
            if not url.host:
                raise DatabaseConfigException(
                    "Database URL must include hostname", config_key="database_url"
                )
            if not url.database:
                raise DatabaseConfigException(
                    "Database URL must include database name", config_key="database_url"
                )

    @property
    def is_sqlite(self) -> bool:
        return self.async_url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        if not self.is_sqlite:
            return False
        database = make_url(self.async_url).database
        return database in (None, "", ":memory:")


def create_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 3600,
    pool_pre_ping: bool = True,
    echo: bool = False,
    use_null_pool: bool = False,
    connect_args: Optional[dict] = None,
) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine with proper configuration.

    In-memory SQLite databases share one connection through ``StaticPool``
    so every session sees the same tables.

    Args:
        database_url: PostgreSQL or SQLite connection URL
        pool_size: Number of connections to maintain in the pool
        max_overflow: Maximum number of connections that can overflow the pool
        pool_timeout: Timeout for getting connection from pool
        pool_recycle: Time in seconds to recycle connections
        pool_pre_ping: Whether to validate connections before use
        echo: Whether to echo SQL statements
        use_null_pool: Whether to use NullPool (useful for testing)
        connect_args: Additional connection arguments

    Returns:
        Configured async SQLAlchemy engine

    Raises:
        DatabaseConfigException: If database URL is invalid
    """
    config = DatabaseConfig(
        database_url=database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        echo=echo,
    )

    engine_kwargs: Dict[str, Any] = {"echo": config.echo}
    connect_args = dict(connect_args or {})

    if config.is_memory:
        engine_kwargs["poolclass"] = StaticPool
        connect_args.setdefault("check_same_thread", False)
    elif use_null_pool:
        engine_kwargs["poolclass"] = NullPool
    elif not config.is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": config.pool_size,
                "max_overflow": config.max_overflow,
                "pool_timeout": config.pool_timeout,
                "pool_recycle": config.pool_recycle,
                "pool_pre_ping": pool_pre_ping,
            }
        )

    if connect_args:
        engine_kwargs["connect_args"] = connect_args

    engine = create_async_engine(config.async_url, **engine_kwargs)
    logger.info(
        f"Created async database engine for "
        f"{DatabaseConfigException.sanitize_url(config.async_url)}"
    )
    return engine


async def check_connection(engine: AsyncEngine) -> bool:
    """
    Check database connectivity with a trivial query.

    Args:
        engine: SQLAlchemy async engine

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection check successful")
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


async def close_engine(engine: AsyncEngine) -> None:
    """
    Properly close the database engine and all connections.

    Args:
        engine: SQLAlchemy async engine to close
    """
    await engine.dispose()
    logger.info("Database engine closed successfully")
