"""
Tests for Settings loading and validation.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vaultkeeper.config import Settings

ENV_VARS = [
    "VAULT_HOST", "VAULT_PORT", "VAULT_DB_DSN", "DB_HOST", "DB_PORT", "DB_NAME",
    "DB_USER", "DB_PASSWORD", "VAULT_DB_POOL_MIN", "VAULT_DB_POOL_MAX",
    "VAULT_ACCESS_SECRET", "VAULT_REFRESH_SECRET", "VAULT_ACCESS_TTL_MINUTES",
    "VAULT_REFRESH_TTL_DAYS", "VAULT_BCRYPT_COST", "VAULT_COOKIE_SECURE",
    "VAULT_AUDIT_DIR", "VAULT_LOG_LEVEL", "VAULT_CORS_ORIGINS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # set first so teardown also removes values load_dotenv adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # keep load_dotenv from picking up a developer's .env
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.port == 8080
        assert s.bcrypt_cost == 4
        assert s.access_ttl_minutes == 15
        assert s.refresh_ttl_days == 30
        assert s.cookie_secure is False
        assert s.cors_origins == []

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(access_secret="")

    @pytest.mark.parametrize("cost", [3, 32])
    def test_bcrypt_cost_bounds(self, cost):
        with pytest.raises(ValidationError):
            Settings(bcrypt_cost=cost)

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_pool_bounds(self):
        with pytest.raises(ValidationError):
            Settings(db_pool_min=5, db_pool_max=2)


class TestFromEnv:

    def test_reads_environment(self, clean_env):
        clean_env.setenv("VAULT_PORT", "9000")
        clean_env.setenv("DB_NAME", "vault_test")
        clean_env.setenv("VAULT_ACCESS_SECRET", "a" * 32)
        clean_env.setenv("VAULT_REFRESH_SECRET", "r" * 32)
        clean_env.setenv("VAULT_BCRYPT_COST", "6")
        clean_env.setenv("VAULT_COOKIE_SECURE", "true")
        clean_env.setenv("VAULT_AUDIT_DIR", "/tmp/vk-audit")
        clean_env.setenv("VAULT_CORS_ORIGINS", "http://localhost:3000, https://vault.example")

        s = Settings.from_env()

        assert s.port == 9000
        assert s.db_name == "vault_test"
        assert s.access_secret == "a" * 32
        assert s.bcrypt_cost == 6
        assert s.cookie_secure is True
        assert s.audit_dir == Path("/tmp/vk-audit")
        assert s.cors_origins == ["http://localhost:3000", "https://vault.example"]

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "test.env"
        env_file.write_text("VAULT_DB_DSN=postgresql://u:p@db/vault\nVAULT_LOG_LEVEL=warning\n")

        s = Settings.from_env(str(env_file))

        assert s.db_dsn == "postgresql://u:p@db/vault"
        assert s.log_level == "WARNING"

    def test_invalid_value(self, clean_env):
        clean_env.setenv("VAULT_PORT", "not-a-port")
        with pytest.raises(ValueError):
            Settings.from_env()
