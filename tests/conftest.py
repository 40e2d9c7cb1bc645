"""
Shared pytest fixtures for the VaultKeeper test suite.

Autouse fixtures below isolate tests from the live application data:
  - Audit logger -> temp directory  (prevents test events in ./audit_logs)

The in-memory repositories mirror the PostgreSQL ones: ids are assigned on
create, updates are scoped by (id, user_id) and raise RecordNotFound when
nothing matches, and stored values are whatever the services hand over
(ciphertext).
"""

import dataclasses
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from vaultkeeper.config import Settings
from vaultkeeper.core.exceptions import RecordNotFound, UserAlreadyExists, UserNotFound
from vaultkeeper.vault.models import User
from vaultkeeper.vault.services import build_services


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Redirect the global AuditLogger to a temp directory for every test.

    Without this, any test that (directly or indirectly) calls
    ``get_audit_logger().log_event(...)`` writes into the real
    ``./audit_logs/`` directory.
    """
    import vaultkeeper.core.audit_log as audit_mod

    # Reset the singleton so the next call to get_audit_logger() creates
    # a fresh instance pointing at the temp directory.
    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = None

    orig_init = audit_mod.AuditLogger.__init__

    def patched_init(self, log_dir=None):
        orig_init(self, log_dir=tmp_path / "audit_logs")

    monkeypatch.setattr(audit_mod.AuditLogger, "__init__", patched_init)

    yield

    if audit_mod._audit_logger is not None:
        audit_mod._audit_logger.close()
    audit_mod._audit_logger = old_logger


# ── In-memory repositories ──────────────────────────────────────────


class InMemoryUserRepository:
    def __init__(self):
        self.users = {}
        self._ids = count(1)

    async def create(self, username, password_hash):
        if username in self.users:
            raise UserAlreadyExists()
        self.users[username] = User(id=next(self._ids), username=username, password_hash=password_hash)

    async def get_by_username(self, username):
        if username not in self.users:
            raise UserNotFound()
        return self.users[username]


class InMemoryRecordRepository:
    def __init__(self):
        self.rows = {}
        self._ids = count(1)

    async def create(self, record):
        record_id = next(self._ids)
        now = datetime.now(timezone.utc)
        self.rows[record_id] = dataclasses.replace(
            record, id=record_id, created_at=now, updated_at=now
        )
        return record_id

    async def update(self, record_id, user_id, changes):
        row = self.rows.get(record_id)
        if row is None or row.user_id != user_id:
            raise RecordNotFound(f"record {record_id} not found")
        self.rows[record_id] = dataclasses.replace(
            row, updated_at=datetime.now(timezone.utc), **changes
        )

    async def get_all_by_user(self, user_id):
        return [row for _, row in sorted(self.rows.items()) if row.user_id == user_id]


class InMemoryRepositoryFactory:
    def __init__(self):
        self.users = InMemoryUserRepository()
        self.cards = InMemoryRecordRepository()
        self.logopass = InMemoryRecordRepository()
        self.notes = InMemoryRecordRepository()
        self.binaries = InMemoryRecordRepository()


# ── Service / app fixtures ──────────────────────────────────────────


@pytest.fixture
def settings(tmp_path):
    return Settings(
        access_secret="test-access-secret-0123456789abcdef",
        refresh_secret="test-refresh-secret-0123456789abcdef",
        bcrypt_cost=4,
        audit_dir=tmp_path / "audit_logs",
    )


@pytest.fixture
def repos():
    return InMemoryRepositoryFactory()


@pytest.fixture
def vault(repos, settings):
    return build_services(repos, settings)


@pytest.fixture
def app(settings, vault):
    """App with in-memory services. Lifespan is not entered, so no database."""
    from vaultkeeper.api.main import create_app
    return create_app(settings, services=vault)


@pytest.fixture
def make_client(app):
    """Factory for independent clients (separate cookie jars) on one app."""
    def _make():
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def alice(make_client):
    """Client registered as alice; cookies (accesstoken, refreshtoken, key) set."""
    c = make_client()
    resp = c.post("/api/user/register", json={"username": "alice", "password": "pw123"})
    assert resp.status_code == 200
    return c


@pytest.fixture
def bob(make_client):
    c = make_client()
    resp = c.post("/api/user/register", json={"username": "bob", "password": "hunter2"})
    assert resp.status_code == 200
    return c
