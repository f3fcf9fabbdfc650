"""Optional path-validity capability used to drop dependencies."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path

PathPredicate = Callable[[str], bool]


class PathFilter:
    """Base capability; the plain instance is the "no filtering" variant."""

    @property
    def active(self) -> bool:
        return False

    def is_invalid(self, path: str) -> bool:
        return False


class PredicatePathFilter(PathFilter):
    """Filter backed by a caller predicate returning True for paths to exclude."""

    def __init__(self, predicate: PathPredicate) -> None:
        self._predicate = predicate

    @property
    def active(self) -> bool:
        return True

    def is_invalid(self, path: str) -> bool:
        return bool(self._predicate(path))


class ProjectTreeFilter(PathFilter):
    """Exclude dependencies located outside every configured project root.

    Relative paths are resolved against ``base_dir``, which is the directory the
    compiler ran in. Resolution is lexical so that generated files which no
    longer exist are still classified.
    """

    def __init__(self, roots: Iterable[Path], base_dir: Path) -> None:
        self._roots = tuple(_lexical_absolute(root, Path.cwd()) for root in roots)
        self._base_dir = _lexical_absolute(base_dir, Path.cwd())

    @property
    def active(self) -> bool:
        return True

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    def is_invalid(self, path: str) -> bool:
        candidate = _lexical_absolute(Path(path), self._base_dir)
        for root in self._roots:
            if candidate.is_relative_to(root):
                return False
        return True


NO_FILTER = PathFilter()


def _lexical_absolute(path: Path, base: Path) -> Path:
    if not path.is_absolute():
        path = base / path
    return Path(os.path.normpath(path))
