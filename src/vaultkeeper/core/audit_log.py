# Core: Audit Logging
#
# Append-only, structured (JSON) audit trail for authentication and vault
# record events. One file per day under the configured audit directory.
#
# Never pass plaintext record fields, secret phrases, passwords or tokens
# into an event. Record ids, user ids and counts only.

import logging
import os
import socket
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog


class EventType(str, Enum):
    """Types of events written to the audit trail."""
    # Identity
    USER_REGISTERED = "user.registered"
    USER_REGISTER_FAILED = "user.register.failed"
    USER_LOGIN = "user.login"
    USER_LOGIN_FAILED = "user.login.failed"
    TOKEN_REFRESHED = "token.refreshed"

    # Authentication gate
    AUTH_REJECTED = "auth.rejected"

    # Vault records
    RECORD_CREATED = "record.created"
    RECORD_UPDATED = "record.updated"
    RECORD_ACCESSED = "record.accessed"
    RECORD_DECRYPT_SKIPPED = "record.decrypt.skipped"

    # System
    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"


class EventSeverity(str, Enum):
    """
    Severity levels for audit events.

    - INFO: normal activity
    - INVESTIGATE: something unusual worth a look (skipped records)
    - ALERT: rejected credentials or tokens
    - CRITICAL: operation failed server-side
    """
    INFO = "info"
    INVESTIGATE = "investigate"
    ALERT = "alert"
    CRITICAL = "critical"


class AuditLogger:
    """
    Append-only audit logger.

    Features:
    - Structured JSON logging via structlog
    - Automatic timestamp and event ID
    - Daily log files
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: ./audit_logs)
        """
        self.log_dir = Path(log_dir) if log_dir else Path("./audit_logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._setup_file_handler()

        self.logger = structlog.get_logger("vaultkeeper.audit")

    def _setup_file_handler(self):
        """Attach a daily file handler to the audit logger."""
        today = datetime.now().strftime("%Y-%m-%d")
        log_file = self.log_dir / f"audit_{today}.log"

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))  # structlog handles formatting

        audit_logger = logging.getLogger("vaultkeeper.audit")
        audit_logger.addHandler(file_handler)
        audit_logger.setLevel(logging.INFO)
        self._file_handler = file_handler

    def close(self):
        """Detach and close the file handler."""
        logging.getLogger("vaultkeeper.audit").removeHandler(self._file_handler)
        self._file_handler.close()

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        user_context: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Log an audit event.

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets)
            user_context: Acting user (user_id, username)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details or {},
            "user_context": user_context or self._get_default_user_context(),
        }

        self.logger.info("audit_event", **event_data)

        return event_id

    def log_record_event(
        self,
        event_type: EventType,
        record_type: str,
        user_id: int,
        details: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
    ) -> str:
        """
        Log a vault record event (create, update, decrypt skip).

        Args:
            event_type: Type of record event
            record_type: "card", "logopass", "note" or "binary"
            user_id: Owning user
            details: Additional details (record id, counts)
            severity: Event severity

        Returns:
            str: Event ID
        """
        event_details = dict(details or {})
        event_details["record_type"] = record_type

        return self.log_event(
            event_type=event_type,
            severity=severity,
            message=f"Vault: {event_type.value} ({record_type})",
            details=event_details,
            user_context={"user_id": user_id},
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        """Get default context (OS user, hostname) for system events."""
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger(log_dir: Optional[Path] = None) -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger(log_dir=log_dir)
    return _audit_logger
