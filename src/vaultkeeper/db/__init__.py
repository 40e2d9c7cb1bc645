"""
Database module for VaultKeeper.

Provides PostgreSQL connectivity, connection pooling, schema setup and
repositories for users and the four record types.

Usage:
    # Startup
    db = await create_database(settings)
    await initialize_schema(db)

    # Create repository factory
    repos = RepositoryFactory(db)

    # Use repositories
    await repos.users.create("alice", password_hash)
    user = await repos.users.get_by_username("alice")

    # Shutdown
    await db.close()
"""

from .connection import (
    Database,
    create_database,
)
from .migrations import initialize_schema
from .repositories import (
    UserRepository,
    RecordRepository,
    CardRepository,
    LoginPasswordRepository,
    NoteRepository,
    BinaryRepository,
    RepositoryFactory,
)

__all__ = [
    "Database",
    "create_database",
    "initialize_schema",
    "UserRepository",
    "RecordRepository",
    "CardRepository",
    "LoginPasswordRepository",
    "NoteRepository",
    "BinaryRepository",
    "RepositoryFactory",
]
