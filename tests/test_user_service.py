"""
Tests for registration, login and token refresh.
"""

import bcrypt
import pytest

from vaultkeeper.core.auth import TokenKind, verify_password
from vaultkeeper.core.exceptions import (
    InvalidCredentials,
    PasswordTooLong,
    TokenError,
    UserAlreadyExists,
    UserNotFound,
)
from vaultkeeper.vault.encryption import EncryptionService
from vaultkeeper.vault.models import User


@pytest.mark.asyncio
async def test_register_returns_phrase_from_stored_hash(vault, repos):
    tokens = await vault.users.register("alice", "pw123")

    stored = repos.users.users["alice"]
    assert stored.password_hash != "pw123"
    assert verify_password("pw123", stored.password_hash)
    assert tokens.secret_phrase == EncryptionService.generate_secret_phrase(stored.password_hash)
    assert len(tokens.secret_phrase) == 14


@pytest.mark.asyncio
async def test_login_phrase_equals_register_phrase(vault):
    registered = await vault.users.register("alice", "pw123")
    logged_in = await vault.users.login("alice", "pw123")
    again = await vault.users.login("alice", "pw123")

    assert logged_in.secret_phrase == registered.secret_phrase
    assert again.secret_phrase == registered.secret_phrase


@pytest.mark.asyncio
async def test_issued_tokens_identify_user(vault):
    tokens = await vault.users.register("alice", "pw123")

    access = vault.tokens.verify(tokens.access_token, TokenKind.ACCESS)
    refresh = vault.tokens.verify(tokens.refresh_token, TokenKind.REFRESH)
    assert access.username == "alice"
    assert refresh.user_id == access.user_id


@pytest.mark.asyncio
async def test_register_duplicate(vault):
    await vault.users.register("alice", "pw123")
    with pytest.raises(UserAlreadyExists):
        await vault.users.register("alice", "other")


@pytest.mark.asyncio
async def test_login_unknown_user(vault):
    with pytest.raises(UserNotFound):
        await vault.users.login("nobody", "pw")


@pytest.mark.asyncio
async def test_login_wrong_password(vault):
    await vault.users.register("alice", "pw123")
    with pytest.raises(InvalidCredentials):
        await vault.users.login("alice", "wrong")


@pytest.mark.asyncio
async def test_users_get_distinct_phrases(vault):
    alice = await vault.users.register("alice", "same-password")
    bob = await vault.users.register("bob", "same-password")
    # distinct salts -> distinct hashes -> distinct phrases
    assert alice.secret_phrase != bob.secret_phrase


@pytest.mark.asyncio
async def test_refresh_issues_new_access_token(vault):
    tokens = await vault.users.register("alice", "pw123")

    refreshed = await vault.users.refresh(tokens.refresh_token)

    assert refreshed.refresh_token == tokens.refresh_token
    assert refreshed.secret_phrase is None
    claims = vault.tokens.verify(refreshed.access_token, TokenKind.ACCESS)
    assert claims.username == "alice"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(vault):
    tokens = await vault.users.register("alice", "pw123")
    with pytest.raises(TokenError):
        await vault.users.refresh(tokens.access_token)


@pytest.mark.asyncio
async def test_register_over_long_password(vault, repos):
    with pytest.raises(PasswordTooLong):
        await vault.users.register("long", "a" * 73)
    assert "long" not in repos.users.users


@pytest.mark.asyncio
async def test_login_over_long_password_against_truncated_hash(vault, repos):
    truncated = bcrypt.hashpw(b"a" * 72, bcrypt.gensalt(rounds=4)).decode("utf-8")
    repos.users.users["legacy"] = User(id=50, username="legacy", password_hash=truncated)

    with pytest.raises(PasswordTooLong):
        await vault.users.login("legacy", "a" * 80)
