"""
Vault entities.

The same dataclasses carry plaintext (service boundary) and ciphertext
(repository boundary); the services decide which one a given instance holds.
Every record belongs to exactly one user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar


@dataclass
class User:
    id: Optional[int]
    username: str
    password_hash: str


@dataclass
class AuthTokens:
    """Result of register/login/refresh."""
    access_token: str
    refresh_token: str
    secret_phrase: Optional[str] = None


@dataclass
class Card:
    user_id: int
    bank_name: str
    number: str
    cvv: str
    exp_date: str
    card_holder_name: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class LoginPassword:
    user_id: int
    app_name: str
    username: str
    password: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Note:
    user_id: int
    title: str
    text_data: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class BinaryData:
    user_id: int
    title: str
    data: bytes
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


T = TypeVar("T")


@dataclass
class DecryptedBatch(Generic[T]):
    """Records that decrypted, plus how many were dropped."""
    records: List[T] = field(default_factory=list)
    skipped: int = 0
