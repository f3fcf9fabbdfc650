"""Render reconciled dependencies for make and for the internal cache."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from depcache.cache import dump_internal_depfile
from depcache.models import DependencyMap

DEFAULT_LINE_CONTINUE = "\\"


@dataclass(slots=True, frozen=True)
class MakefileStyle:
    """Formatting policy for the make-facing dependency file."""

    build_dir: Path
    line_continue: str = DEFAULT_LINE_CONTINUE
    relative_roots: tuple[Path, ...] = field(default_factory=tuple)

    def relative_path(self, path: str) -> str:
        """Express ``path`` relative to ``build_dir`` when both share a root."""
        if not os.path.isabs(path):
            return path
        candidate = Path(os.path.normpath(path))
        build_dir = Path(os.path.normpath(self.build_dir))
        for root in self.relative_roots:
            normalized_root = Path(os.path.normpath(root))
            if candidate.is_relative_to(normalized_root) and build_dir.is_relative_to(
                normalized_root
            ):
                return os.path.relpath(candidate, build_dir)
        return path

    def convert(self, path: str) -> str:
        """Relativize then escape a dependency path for make."""
        return make_escape(self.relative_path(path))


def make_escape(path: str) -> str:
    """Escape a path so make reads it back as a single word."""
    escaped = path.replace("\\", "/")
    escaped = escaped.replace("$", "$$")
    escaped = escaped.replace("#", "\\#")
    return escaped.replace(" ", "\\ ")


def write_dependencies(
    dependencies: DependencyMap,
    make_depends: TextIO,
    internal_depends: TextIO,
    style: MakefileStyle,
) -> None:
    """Write the make rules, phony fallbacks and the internal cache encoding."""
    phony_targets: dict[str, None] = {}
    for target, deps in dependencies.items():
        if not deps:
            continue
        converted = [style.convert(dep) for dep in deps]
        make_depends.write(f"{make_escape(target)}: {converted[0]}")
        # the source is compiled, never declared phony
        for dep in converted[1:]:
            make_depends.write(f" {style.line_continue}\n  {dep}")
            phony_targets.setdefault(dep, None)
        make_depends.write("\n\n")

    for dep in phony_targets:
        make_depends.write(f"\n{dep}:\n")

    dump_internal_depfile(dependencies, internal_depends)
