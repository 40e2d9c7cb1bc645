"""
PostgreSQL connection pooling and management.

Provides an async connection pool with configurable parameters,
automatic cleanup, and connection verification.
"""

import asyncpg
import logging
from typing import Any, Optional
from contextlib import asynccontextmanager

from ..config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    PostgreSQL connection pool manager.

    Handles connection creation, pooling, and lifecycle management.

    Attributes:
        pool: asyncpg connection pool (None until initialize() called)
        dsn: Full connection string; when set, host/port/database/user/password are ignored
        min_size: Minimum pool connections
        max_size: Maximum pool connections
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "vaultkeeper",
        user: str = "postgres",
        password: str = "",
        min_size: int = 1,
        max_size: int = 10,
        dsn: Optional[str] = None,
    ):
        self.dsn = dsn
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            host=settings.db_host,
            port=settings.db_port,
            database=settings.db_name,
            user=settings.db_user,
            password=settings.db_password,
            min_size=settings.db_pool_min,
            max_size=settings.db_pool_max,
            dsn=settings.db_dsn,
        )

    def describe(self) -> str:
        """Connection target without credentials, for logs."""
        if self.dsn:
            return "<dsn>"
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

    async def initialize(self) -> None:
        """
        Create connection pool and verify it with a round trip.

        Raises:
            asyncpg.PostgresError: If connection fails
            OSError: If the server is unreachable
        """
        try:
            if self.dsn:
                self.pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    timeout=30.0,
                    command_timeout=30.0,
                )
            else:
                self.pool = await asyncpg.create_pool(
                    host=self.host,
                    port=self.port,
                    database=self.database,
                    user=self.user,
                    password=self.password,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    timeout=30.0,
                    command_timeout=30.0,
                )
            await self.fetchval("SELECT 1")
            logger.info(f"Database pool initialized: {self.describe()}")
        except asyncpg.PostgresError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise
        except OSError as e:
            logger.error(f"Database unreachable ({self.describe()}): {e}")
            raise

    async def close(self) -> None:
        """Close connection pool. Called during application shutdown."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """
        Context manager for acquiring connection from pool.

        Usage:
            async with db.acquire() as conn:
                result = await conn.fetch(...)

        Raises:
            RuntimeError: If pool not initialized
        """
        if not self.pool:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")

        conn = await self.pool.acquire()
        try:
            yield conn
        finally:
            await self.pool.release(conn)

    async def fetch(self, query: str, *args) -> list:
        """Execute SELECT query and return all rows."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        """Execute SELECT query and return first row or None."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        """Execute query and return the first column of the first row."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def execute(self, query: str, *args) -> str:
        """
        Execute INSERT/UPDATE/DELETE query.

        Returns:
            Command status (e.g., "UPDATE 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args)


async def create_database(settings: Settings) -> Database:
    """
    Create and initialize a database pool from settings.

    Raises:
        asyncpg.PostgresError: If connection fails
    """
    db = Database.from_settings(settings)
    await db.initialize()
    return db
