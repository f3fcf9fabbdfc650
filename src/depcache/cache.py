"""Line-oriented persistence for the internal dependency cache."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from depcache.models import DependencyMap
from depcache.timestamps import FileTime


@dataclass(slots=True, frozen=True)
class CacheState:
    """Timestamp of the loaded cache and whether every record must be reparsed."""

    timestamp: FileTime | None
    force_reload: bool


def load_internal_depfile(
    path: str | os.PathLike[str], dependencies: DependencyMap
) -> CacheState:
    """Merge cached dependencies from ``path`` into ``dependencies``.

    A missing, unreadable or undecodable file forces a full reload instead of
    raising.
    """
    timestamp = FileTime.load(path)
    if timestamp is None:
        return CacheState(timestamp=None, force_reload=True)
    try:
        with Path(path).open("r", encoding="utf-8", newline="") as handle:
            content = handle.read()
    except (OSError, UnicodeDecodeError):
        return CacheState(timestamp=None, force_reload=True)
    parsed = parse_internal_depfile(content.split("\n"))
    for target, deps in parsed.items():
        dependencies.setdefault(target, []).extend(deps)
    return CacheState(timestamp=timestamp, force_reload=False)


def parse_internal_depfile(lines: Iterable[str]) -> DependencyMap:
    """Decode internal cache lines into a dependency map."""
    output: DependencyMap = {}
    current: list[str] | None = None
    for raw_line in lines:
        line = raw_line
        if not line or line.startswith("#"):
            continue
        if line.endswith("\r"):
            line = line[:-1]
            if not line:
                continue
        if not line.startswith(" "):
            current = output.setdefault(line, [])
            continue
        if current is not None:
            current.append(line[1:])
    return output


def dump_internal_depfile(dependencies: DependencyMap, stream: TextIO) -> None:
    """Write the encoding read back by ``parse_internal_depfile``."""
    for target, deps in dependencies.items():
        stream.write(f"{target}\n")
        for dep in deps:
            stream.write(f" {dep}\n")
        stream.write("\n")
