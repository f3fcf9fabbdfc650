"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from depcache.emitter import DEFAULT_LINE_CONTINUE

CONFIG_FILE_NAME = "depcache.toml"
DEFAULT_INTERNAL_DEPFILE = "compiler_depend.internal"
DEFAULT_MAKE_DEPFILE = "compiler_depend.make"
DEFAULT_DATA_DIR = ".depcache"


@dataclass(slots=True, frozen=True)
class MakefileConfig:
    """Formatting settings for the make-facing dependency file."""

    line_continue: str
    relative_roots: tuple[Path, ...]


@dataclass(slots=True, frozen=True)
class DependsOptions:
    """Reconciliation toggles."""

    in_project_only: bool
    verbose: bool


@dataclass(slots=True, frozen=True)
class DepcacheConfig:
    """Fully merged configuration for one build directory."""

    build_dir: Path
    source_dir: Path | None
    internal_depfile: Path
    make_depfile: Path
    makefile: MakefileConfig
    depends: DependsOptions
    audit_enabled: bool

    @property
    def audit_path(self) -> Path:
        return self.build_dir / DEFAULT_DATA_DIR / "audit.jsonl"

    @property
    def project_roots(self) -> tuple[Path, ...]:
        """Directories whose files count as project dependencies."""
        if self.source_dir is None:
            return (self.build_dir,)
        return (self.source_dir, self.build_dir)

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "build_dir": str(self.build_dir),
            "source_dir": str(self.source_dir) if self.source_dir is not None else None,
            "internal_depfile": str(self.internal_depfile),
            "make_depfile": str(self.make_depfile),
            "makefile": {
                "line_continue": self.makefile.line_continue,
                "relative_roots": [str(root) for root in self.makefile.relative_roots],
            },
            "depends": {
                "in_project_only": self.depends.in_project_only,
                "verbose": self.depends.verbose,
            },
            "audit": {
                "enabled": self.audit_enabled,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    source_dir: Path | None = None
    internal_depfile: Path | None = None
    make_depfile: Path | None = None
    in_project_only: bool | None = None
    verbose: bool | None = None
    audit_enabled: bool | None = None


def default_config(build_dir: Path) -> DepcacheConfig:
    """Build default config for a given build directory."""
    absolute = _absolute(build_dir)
    return DepcacheConfig(
        build_dir=absolute,
        source_dir=None,
        internal_depfile=absolute / DEFAULT_INTERNAL_DEPFILE,
        make_depfile=absolute / DEFAULT_MAKE_DEPFILE,
        makefile=MakefileConfig(line_continue=DEFAULT_LINE_CONTINUE, relative_roots=()),
        depends=DependsOptions(in_project_only=False, verbose=False),
        audit_enabled=True,
    )


def load_build_config_file(build_dir: Path) -> dict[str, object]:
    """Load optional depcache.toml from the build directory."""
    config_path = build_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_str(value: object, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _tuple_of_paths(value: object, name: str, base: Path) -> tuple[Path, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{name}' must be a list of strings.")
    output: list[Path] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{name}' must contain only strings.")
        output.append(_absolute_against(base, Path(item)))
    return tuple(output)


def _absolute_against(base: Path, path: Path) -> Path:
    return _absolute(base / path)


def _absolute(path: Path) -> Path:
    # lexical only: depfile paths are compared as the compiler spelled them
    return Path(os.path.normpath(path.absolute()))


def merge_config(
    base: DepcacheConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> DepcacheConfig:
    """Merge defaults, build-directory config, then CLI overrides."""
    paths_payload = _get_table(file_payload, "paths")
    makefile_payload = _get_table(file_payload, "makefile")
    depends_payload = _get_table(file_payload, "depends")
    audit_payload = _get_table(file_payload, "audit")
    build_dir = base.build_dir

    source_dir = base.source_dir
    raw_source_dir = _optional_str(paths_payload.get("source_dir"), "paths.source_dir")
    if raw_source_dir is not None:
        source_dir = _absolute_against(build_dir, Path(raw_source_dir))

    internal_depfile = base.internal_depfile
    raw_internal = _optional_str(paths_payload.get("internal_depfile"), "paths.internal_depfile")
    if raw_internal is not None:
        internal_depfile = _absolute_against(build_dir, Path(raw_internal))

    make_depfile = base.make_depfile
    raw_make = _optional_str(paths_payload.get("make_depfile"), "paths.make_depfile")
    if raw_make is not None:
        make_depfile = _absolute_against(build_dir, Path(raw_make))

    line_continue = base.makefile.line_continue
    if "line_continue" in makefile_payload:
        raw_line_continue = makefile_payload["line_continue"]
        if not isinstance(raw_line_continue, str) or not raw_line_continue:
            raise ValueError("Config field 'makefile.line_continue' must be a non-empty string.")
        line_continue = raw_line_continue

    relative_roots = base.makefile.relative_roots
    if "relative_roots" in makefile_payload:
        relative_roots = _tuple_of_paths(
            makefile_payload["relative_roots"], "makefile.relative_roots", build_dir
        )

    merged = DepcacheConfig(
        build_dir=build_dir,
        source_dir=source_dir,
        internal_depfile=internal_depfile,
        make_depfile=make_depfile,
        makefile=MakefileConfig(line_continue=line_continue, relative_roots=relative_roots),
        depends=DependsOptions(
            in_project_only=_optional_bool(
                depends_payload.get("in_project_only"),
                "depends.in_project_only",
                base.depends.in_project_only,
            ),
            verbose=_optional_bool(
                depends_payload.get("verbose"), "depends.verbose", base.depends.verbose
            ),
        ),
        audit_enabled=_optional_bool(
            audit_payload.get("enabled"), "audit.enabled", base.audit_enabled
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DepcacheConfig, overrides: CliOverrides) -> DepcacheConfig:
    """Apply startup overrides at highest precedence."""
    source_dir = config.source_dir
    if overrides.source_dir is not None:
        source_dir = _absolute(overrides.source_dir)
    relative_roots = config.makefile.relative_roots
    if not relative_roots:
        relative_roots = (source_dir, config.build_dir) if source_dir else (config.build_dir,)
    return DepcacheConfig(
        build_dir=config.build_dir,
        source_dir=source_dir,
        internal_depfile=_absolute(overrides.internal_depfile or config.internal_depfile),
        make_depfile=_absolute(overrides.make_depfile or config.make_depfile),
        makefile=MakefileConfig(
            line_continue=config.makefile.line_continue,
            relative_roots=relative_roots,
        ),
        depends=DependsOptions(
            in_project_only=(
                overrides.in_project_only
                if overrides.in_project_only is not None
                else config.depends.in_project_only
            ),
            verbose=(
                overrides.verbose if overrides.verbose is not None else config.depends.verbose
            ),
        ),
        audit_enabled=(
            overrides.audit_enabled
            if overrides.audit_enabled is not None
            else config.audit_enabled
        ),
    )


def load_effective_config(
    build_dir: Path, overrides: CliOverrides | None = None
) -> DepcacheConfig:
    """Load effective config using merge order defaults -> depcache.toml -> overrides."""
    absolute = _absolute(build_dir)
    base = default_config(absolute)
    payload = load_build_config_file(absolute)
    return merge_config(base, payload, overrides or CliOverrides())
