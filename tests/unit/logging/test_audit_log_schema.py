from __future__ import annotations

import json
from pathlib import Path

from depcache.logging import AuditEvent, JsonlAuditLogger


def _event(timestamp: str, status: str) -> AuditEvent:
    return AuditEvent(
        timestamp=timestamp,
        operation="update",
        status=status,
        internal_depfile="/build/compiler_depend.internal",
        metadata={"reparsed": 1},
    )


def test_audit_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / ".depcache" / "audit.jsonl")
    logger.append(_event("2026-01-01T00:00:00.000Z", "updated"))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    event = json.loads(lines[-1])

    assert set(event.keys()) == {
        "internal_depfile",
        "metadata",
        "operation",
        "status",
        "timestamp",
    }
    assert event["status"] == "updated"
    assert event["metadata"] == {"reparsed": 1}


def test_audit_log_read_since_and_limit(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "audit.jsonl")
    logger.append(_event("2026-01-01T00:00:00.000Z", "updated"))
    logger.append(_event("2026-01-02T00:00:00.000Z", "up-to-date"))
    logger.append(_event("2026-01-03T00:00:00.000Z", "up-to-date"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    assert [entry["timestamp"] for entry in logger.read(limit=2)] == [
        "2026-01-02T00:00:00.000Z",
        "2026-01-03T00:00:00.000Z",
    ]
    assert len(logger.read(since="2026-01-02T00:00:00.000Z")) == 2
    assert logger.read(limit=0) == []


def test_audit_log_read_filters_by_operation(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "audit.jsonl")
    logger.append(_event("2026-01-01T00:00:00.000Z", "updated"))
    logger.append(
        AuditEvent(
            timestamp="2026-01-02T00:00:00.000Z",
            operation="clear",
            status="cleared",
            internal_depfile="/build/compiler_depend.internal",
            metadata={},
        )
    )

    assert [entry["status"] for entry in logger.read(operation="clear")] == ["cleared"]
    assert [entry["status"] for entry in logger.read(operation="update")] == ["updated"]
