"""Best-effort removal of compiler depfiles."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from depcache.models import CompileRecord


def clear_dependencies(records: Iterable[CompileRecord]) -> int:
    """Delete every record's depfile and return how many were removed."""
    removed = 0
    for record in records:
        try:
            Path(record.depfile).unlink()
        except OSError:
            continue
        removed += 1
    return removed
