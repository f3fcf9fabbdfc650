"""File modification time comparison."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FileTime:
    """Opaque, totally ordered modification marker for one file."""

    mtime_ns: int

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> FileTime | None:
        """Return the modification time of ``path`` or None when it cannot be stat-ed."""
        try:
            stat = os.stat(path)
        except OSError:
            return None
        return cls(mtime_ns=stat.st_mtime_ns)

    def newer(self, other: FileTime) -> bool:
        """Return True when this time is strictly later than ``other``."""
        return self.mtime_ns > other.mtime_ns
