"""
Tests for the structured audit trail.
"""

import json

import pytest

from vaultkeeper.core.audit_log import AuditLogger, EventSeverity, EventType


@pytest.fixture
def audit(tmp_path):
    logger = AuditLogger(tmp_path / "audit_logs")
    yield logger
    logger.close()


def read_events(audit):
    lines = []
    for path in audit.log_dir.glob("audit_*.log"):
        lines.extend(line for line in path.read_text().splitlines() if line)
    return [json.loads(line) for line in lines]


def test_event_written_as_json(audit):
    event_id = audit.log_event(
        EventType.AUTH_REJECTED,
        EventSeverity.ALERT,
        "Access token rejected: token expired",
        details={"reason": "token expired"},
    )

    [event] = read_events(audit)
    assert event["event_id"] == event_id
    assert event["event_type"] == "auth.rejected"
    assert event["severity"] == "alert"
    assert event["details"] == {"reason": "token expired"}


def test_record_event_carries_type_and_user(audit):
    audit.log_record_event(EventType.RECORD_CREATED, "card", 7, details={"record_id": 3})

    [event] = read_events(audit)
    assert event["details"] == {"record_id": 3, "record_type": "card"}
    assert event["user_context"] == {"user_id": 7}


def test_no_deprecated_clock(audit, recwarn):
    audit.log_event(EventType.SYSTEM_START, EventSeverity.INFO, "starting")
    assert not [w for w in recwarn if "utcnow" in str(w.message)]
