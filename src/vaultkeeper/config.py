"""
Runtime configuration.

Values come from environment variables (optionally via a .env file in the
working directory) with development-friendly defaults:

    VAULT_HOST / VAULT_PORT            HTTP bind address
    VAULT_DB_DSN                       full PostgreSQL DSN (overrides DB_*)
    DB_HOST / DB_PORT / DB_NAME / DB_USER / DB_PASSWORD
    VAULT_DB_POOL_MIN / VAULT_DB_POOL_MAX
    VAULT_ACCESS_SECRET / VAULT_REFRESH_SECRET
    VAULT_ACCESS_TTL_MINUTES / VAULT_REFRESH_TTL_DAYS
    VAULT_BCRYPT_COST                  bcrypt work factor (4..31)
    VAULT_COOKIE_SECURE                set Secure on auth cookies
    VAULT_AUDIT_DIR                    directory for audit logs
    VAULT_CORS_ORIGINS                 comma-separated browser origins (CORS off when empty)
    VAULT_LOG_LEVEL

Security Note:
    Never log the token secrets. Only their presence is reported.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Validated service configuration."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)

    db_dsn: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = "vaultkeeper"
    db_user: str = "postgres"
    db_password: str = ""
    db_pool_min: int = Field(default=1, ge=1)
    db_pool_max: int = Field(default=10, ge=1)

    access_secret: str = "access"
    refresh_secret: str = "refresh"
    access_ttl_minutes: int = Field(default=15, ge=1)
    refresh_ttl_days: int = Field(default=30, ge=1)

    # bcrypt refuses cost factors outside 4..31
    bcrypt_cost: int = Field(default=4, ge=4, le=31)

    cookie_secure: bool = False
    cors_origins: List[str] = Field(default_factory=list)
    audit_dir: Path = Path("./audit_logs")
    log_level: str = "INFO"

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("access_secret", "refresh_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        if not v:
            raise ValueError("token secrets must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported log level: {v}")
        return v

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "Settings":
        if self.db_pool_min > self.db_pool_max:
            raise ValueError(
                f"db_pool_min ({self.db_pool_min}) exceeds "
                f"db_pool_max ({self.db_pool_max})"
            )
        return self

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Create Settings from the process environment.

        Args:
            env_file: Optional path to a .env file. When omitted, python-dotenv
                searches the working directory. Existing variables win.

        Returns:
            Populated Settings instance.

        Raises:
            ValueError: If a value fails to parse or validate.
        """
        load_dotenv(env_file)
        env = os.environ
        settings = cls(
            host=env.get("VAULT_HOST", "127.0.0.1"),
            port=int(env.get("VAULT_PORT", "8080")),
            db_dsn=env.get("VAULT_DB_DSN") or None,
            db_host=env.get("DB_HOST", "localhost"),
            db_port=int(env.get("DB_PORT", "5432")),
            db_name=env.get("DB_NAME", "vaultkeeper"),
            db_user=env.get("DB_USER", "postgres"),
            db_password=env.get("DB_PASSWORD", ""),
            db_pool_min=int(env.get("VAULT_DB_POOL_MIN", "1")),
            db_pool_max=int(env.get("VAULT_DB_POOL_MAX", "10")),
            access_secret=env.get("VAULT_ACCESS_SECRET", "access"),
            refresh_secret=env.get("VAULT_REFRESH_SECRET", "refresh"),
            access_ttl_minutes=int(env.get("VAULT_ACCESS_TTL_MINUTES", "15")),
            refresh_ttl_days=int(env.get("VAULT_REFRESH_TTL_DAYS", "30")),
            bcrypt_cost=int(env.get("VAULT_BCRYPT_COST", "4")),
            cookie_secure=env.get("VAULT_COOKIE_SECURE", "").lower() in _TRUE_VALUES,
            cors_origins=[o.strip() for o in env.get("VAULT_CORS_ORIGINS", "").split(",") if o.strip()],
            audit_dir=Path(env.get("VAULT_AUDIT_DIR", "./audit_logs")),
            log_level=env.get("VAULT_LOG_LEVEL", "INFO"),
        )
        if settings.access_secret == "access" or settings.refresh_secret == "refresh":
            logger.warning("Using default token secrets; set VAULT_ACCESS_SECRET and VAULT_REFRESH_SECRET")
        return settings
