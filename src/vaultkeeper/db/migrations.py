"""
Database schema initialization.
"""

import logging
from pathlib import Path

from .connection import Database

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def initialize_schema(db: Database, schema_path: Path = SCHEMA_PATH) -> bool:
    """
    Create tables and indexes from schema.sql.

    Idempotent (safe to call on every start).

    Raises:
        FileNotFoundError: If schema.sql not found
        asyncpg.PostgresError: If schema creation fails
    """
    if not schema_path.exists():
        logger.error(f"Schema file not found: {schema_path}")
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    schema_sql = schema_path.read_text(encoding="utf-8")

    # asyncpg runs a multi-statement script in one call when no args are passed
    async with db.acquire() as conn:
        await conn.execute(schema_sql)

    logger.info("Database schema initialized successfully")
    return True
