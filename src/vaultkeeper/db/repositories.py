"""
Data access objects (repositories) for vault entities.

Provides storage operations for:
- Users
- Cards
- Login/password pairs
- Notes
- Binary data

Record repositories see ciphertext only; encryption happens in the
services above them. Every record query is scoped by user_id.
"""

import logging
from typing import Any, Dict, List, Tuple, Type

import asyncpg

from ..core.exceptions import RecordNotFound, UserAlreadyExists, UserNotFound
from ..vault.models import BinaryData, Card, LoginPassword, Note, User

logger = logging.getLogger(__name__)


class UserRepository:
    """User data access object."""

    def __init__(self, db):
        """Initialize with database instance."""
        self.db = db

    async def create(self, username: str, password_hash: str) -> None:
        """
        Insert a new user.

        Raises:
            UserAlreadyExists: If the username is taken
            asyncpg.PostgresError: For any other database failure
        """
        try:
            await self.db.execute(
                "INSERT INTO users (username, password_hash) VALUES ($1, $2)",
                username,
                password_hash,
            )
        except asyncpg.UniqueViolationError as e:
            raise UserAlreadyExists() from e

        logger.info("User created")

    async def get_by_username(self, username: str) -> User:
        """
        Get user by username.

        Raises:
            UserNotFound: If no such user exists
        """
        result = await self.db.fetchrow(
            "SELECT id, username, password_hash FROM users WHERE username = $1",
            username,
        )
        if not result:
            raise UserNotFound()
        return User(
            id=result["id"],
            username=result["username"],
            password_hash=result["password_hash"],
        )


class RecordRepository:
    """
    Owner-scoped storage for one record table.

    Subclasses name the table, the dataclass rows map to, and the columns
    a client may write.
    """

    table: str = ""
    model: Type = None
    columns: Tuple[str, ...] = ()

    def __init__(self, db):
        """Initialize with database instance."""
        self.db = db

    def _to_model(self, row) -> Any:
        values = {name: row[name] for name in self.columns}
        if isinstance(values.get("data"), memoryview):
            values["data"] = bytes(values["data"])
        return self.model(
            id=row["id"],
            user_id=row["user_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            **values,
        )

    async def create(self, record) -> int:
        """
        Insert a record and return its ID.

        Raises:
            asyncpg.PostgresError: If creation fails
        """
        names = ("user_id",) + self.columns
        placeholders = ", ".join(f"${i}" for i in range(1, len(names) + 1))
        record_id = await self.db.fetchval(
            f"INSERT INTO {self.table} ({', '.join(names)}) "
            f"VALUES ({placeholders}) RETURNING id",
            record.user_id,
            *(getattr(record, name) for name in self.columns),
        )

        logger.info(f"{self.table} record created: {record_id} (user {record.user_id})")
        return record_id

    async def update(self, record_id: int, user_id: int, changes: Dict[str, Any]) -> None:
        """
        Overwrite the given columns of one of the user's records.

        Raises:
            ValueError: If changes is empty or names a column outside `columns`
            RecordNotFound: If no record with that id belongs to the user
        """
        if not changes:
            raise ValueError("no columns to update")
        unknown = set(changes) - set(self.columns)
        if unknown:
            raise ValueError(f"unknown {self.table} columns: {sorted(unknown)}")

        names = [name for name in self.columns if name in changes]
        assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(names, start=1))
        id_param = len(names) + 1

        result = await self.db.execute(
            f"UPDATE {self.table} SET {assignments}, updated_at = NOW() "
            f"WHERE id = ${id_param} AND user_id = ${id_param + 1}",
            *(changes[name] for name in names),
            record_id,
            user_id,
        )
        if result.split()[-1] == "0":  # "UPDATE 0"
            raise RecordNotFound(f"{self.table} record {record_id} not found")

        logger.info(f"{self.table} record updated: {record_id}")

    async def get_all_by_user(self, user_id: int) -> List:
        """All records owned by the user, oldest first. Empty list if none."""
        results = await self.db.fetch(
            f"SELECT * FROM {self.table} WHERE user_id = $1 ORDER BY id",
            user_id,
        )
        return [self._to_model(r) for r in results]


class CardRepository(RecordRepository):
    table = "cards"
    model = Card
    columns = ("bank_name", "number", "cvv", "exp_date", "card_holder_name")


class LoginPasswordRepository(RecordRepository):
    table = "passwords"
    model = LoginPassword
    columns = ("app_name", "username", "password")


class NoteRepository(RecordRepository):
    table = "notes"
    model = Note
    columns = ("title", "text_data")


class BinaryRepository(RecordRepository):
    table = "binary_data"
    model = BinaryData
    columns = ("title", "data")


class RepositoryFactory:
    """Factory for creating repository instances."""

    def __init__(self, db):
        """Initialize with database instance."""
        self.db = db
        self._users = None
        self._cards = None
        self._logopass = None
        self._notes = None
        self._binaries = None

    @property
    def users(self) -> UserRepository:
        """Get user repository (lazy singleton)."""
        if not self._users:
            self._users = UserRepository(self.db)
        return self._users

    @property
    def cards(self) -> CardRepository:
        """Get card repository (lazy singleton)."""
        if not self._cards:
            self._cards = CardRepository(self.db)
        return self._cards

    @property
    def logopass(self) -> LoginPasswordRepository:
        """Get login/password repository (lazy singleton)."""
        if not self._logopass:
            self._logopass = LoginPasswordRepository(self.db)
        return self._logopass

    @property
    def notes(self) -> NoteRepository:
        """Get note repository (lazy singleton)."""
        if not self._notes:
            self._notes = NoteRepository(self.db)
        return self._notes

    @property
    def binaries(self) -> BinaryRepository:
        """Get binary data repository (lazy singleton)."""
        if not self._binaries:
            self._binaries = BinaryRepository(self.db)
        return self._binaries
