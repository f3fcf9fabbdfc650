"""Structured JSONL audit log for reconciliation passes."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One update or clear pass over a build directory."""

    timestamp: str
    operation: str
    status: str
    internal_depfile: str
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(
        self, since: str | None = None, operation: str | None = None, limit: int = 50
    ) -> list[dict[str, object]]:
        """Return the last ``limit`` passes, oldest first.

        ``since`` is an inclusive timestamp lower bound; ``operation`` keeps only
        ``update`` or ``clear`` passes. Lines that are not JSON objects are skipped.
        """
        if limit < 1 or not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as handle:
            events = [_decode_event(line) for line in handle]
        selected = [
            event
            for event in events
            if event is not None and _matches(event, since=since, operation=operation)
        ]
        return selected[-limit:]


def _decode_event(line: str) -> dict[str, object] | None:
    stripped = line.strip()
    if not stripped:
        return None
    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _matches(event: dict[str, object], since: str | None, operation: str | None) -> bool:
    if operation is not None and event.get("operation") != operation:
        return False
    if since is None:
        return True
    timestamp = event.get("timestamp")
    return isinstance(timestamp, str) and timestamp >= since
