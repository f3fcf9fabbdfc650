"""Reader for flat one-path-per-line dependency listings."""

from __future__ import annotations

import os
from pathlib import Path


def read_flat_listing(path: str | os.PathLike[str]) -> list[str] | None:
    """Return listed paths in file order, or None when the file cannot be read."""
    try:
        with Path(path).open("r", encoding="utf-8", newline="") as handle:
            lines = handle.read().split("\n")
    except (OSError, UnicodeDecodeError):
        return None
    output: list[str] = []
    for raw_line in lines:
        line = raw_line.removesuffix("\r")
        if not line:
            continue
        output.append(line)
    return output
