# Core Module - Shared Utilities
#
# - Audit logging
# - Credential hashing and token handling
# - Exception hierarchy

from .audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    get_audit_logger,
)
from .auth import (
    TokenClaims,
    TokenKind,
    TokenService,
    hash_password,
    verify_password,
)

__all__ = [
    # Audit Logging
    "AuditLogger",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    # Credentials
    "TokenClaims",
    "TokenKind",
    "TokenService",
    "hash_password",
    "verify_password",
]
