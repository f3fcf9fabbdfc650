"""One dependency-update pass over a build directory."""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from depcache.cache import load_internal_depfile
from depcache.cleanup import clear_dependencies
from depcache.config import DepcacheConfig
from depcache.emitter import MakefileStyle, write_dependencies
from depcache.filters import NO_FILTER, PathFilter, ProjectTreeFilter
from depcache.logging import AuditEvent, JsonlAuditLogger, utc_timestamp
from depcache.models import CompileRecord, DependencyMap, DepfileFormat, records_from_flat
from depcache.reconcile import check_dependencies

_RECORD_FIELDS = ("source", "target", "format", "depfile")


class RecordsFileError(Exception):
    """Raised when a compile-record batch cannot be decoded."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


@dataclass(slots=True, frozen=True)
class UpdateResult:
    """Outcome of one update pass."""

    up_to_date: bool
    targets: int
    profile: dict[str, object]


def load_records(path: Path) -> tuple[CompileRecord, ...]:
    """Read a JSON record batch: a list of record objects or a flat string list."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except OSError as error:
        raise RecordsFileError(
            reason=f"Cannot read record batch '{path}'.",
            hint=str(error),
        ) from error
    except json.JSONDecodeError as error:
        raise RecordsFileError(
            reason=f"Record batch '{path}' is not valid JSON.",
            hint="Provide a JSON list of records.",
        ) from error
    return records_from_payload(payload)


def records_from_payload(payload: object) -> tuple[CompileRecord, ...]:
    """Decode an already-parsed record batch."""
    if not isinstance(payload, list):
        raise RecordsFileError(
            reason="Record batch must be a JSON list.",
            hint="Use a list of {source, target, format, depfile} objects.",
        )
    if all(isinstance(item, str) for item in payload):
        try:
            return records_from_flat(payload)
        except ValueError as error:
            raise RecordsFileError(
                reason=str(error),
                hint="Flat batches list source, target, format and depfile per record.",
            ) from error

    records: list[CompileRecord] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise RecordsFileError(
                reason=f"Record {index} must be an object.",
                hint="Do not mix flat strings and record objects.",
            )
        values: list[str] = []
        for name in _RECORD_FIELDS:
            value = item.get(name)
            if not isinstance(value, str) or not value:
                raise RecordsFileError(
                    reason=f"Record {index} field '{name}' must be a non-empty string.",
                    hint=f"Each record needs: {', '.join(_RECORD_FIELDS)}.",
                )
            values.append(value)
        source, target, token, depfile = values
        records.append(
            CompileRecord(
                source=source,
                target=target,
                format=DepfileFormat.from_token(token),
                depfile=depfile,
            )
        )
    return tuple(records)


class DependsUpdater:
    """Reconciles and rewrites the dependency artifacts of one build directory."""

    def __init__(self, config: DepcacheConfig, out: TextIO | None = None) -> None:
        self._config = config
        self._out = out if out is not None else sys.stdout
        self._style = MakefileStyle(
            build_dir=config.build_dir,
            line_continue=config.makefile.line_continue,
            relative_roots=config.makefile.relative_roots,
        )
        self._audit_logger = JsonlAuditLogger(path=config.audit_path)

    @property
    def audit_logger(self) -> JsonlAuditLogger:
        return self._audit_logger

    def path_filter(self) -> PathFilter:
        """Return the dependency filter selected by configuration."""
        if not self._config.depends.in_project_only:
            return NO_FILTER
        return ProjectTreeFilter(self._config.project_roots, base_dir=self._config.build_dir)

    def update(self, records: Sequence[CompileRecord]) -> UpdateResult:
        """Reconcile ``records`` and rewrite both artifacts when anything changed.

        A lost make-facing file is regenerated from the cache even when every
        depfile is up to date.
        """
        dependencies: DependencyMap = {}
        profile: dict[str, object] = {}
        up_to_date = check_dependencies(
            self._config.internal_depfile,
            records,
            dependencies,
            path_filter=self.path_filter(),
            verbose=self._config.depends.verbose,
            out=self._out,
            profile=profile,
        )
        if not up_to_date or not self._config.make_depfile.exists():
            self._write_artifacts(dependencies)
        self._log("update", "up-to-date" if up_to_date else "updated", profile)
        return UpdateResult(up_to_date=up_to_date, targets=len(dependencies), profile=profile)

    def clear(self, records: Sequence[CompileRecord]) -> int:
        """Remove depfiles and cached artifacts so the next pass reloads everything."""
        removed = clear_dependencies(records)
        for path in (self._config.internal_depfile, self._config.make_depfile):
            path.unlink(missing_ok=True)
        self._log("clear", "cleared", {"records": len(records), "removed_depfiles": removed})
        return removed

    def cached(self) -> DependencyMap:
        """Return the dependency map currently persisted in the internal file."""
        dependencies: DependencyMap = {}
        load_internal_depfile(self._config.internal_depfile, dependencies)
        return dependencies

    def _write_artifacts(self, dependencies: DependencyMap) -> None:
        make_path = self._config.make_depfile
        internal_path = self._config.internal_depfile
        make_path.parent.mkdir(parents=True, exist_ok=True)
        internal_path.parent.mkdir(parents=True, exist_ok=True)
        make_tmp = make_path.with_suffix(make_path.suffix + ".tmp")
        internal_tmp = internal_path.with_suffix(internal_path.suffix + ".tmp")
        try:
            with (
                make_tmp.open("w", encoding="utf-8", newline="\n") as make_handle,
                internal_tmp.open("w", encoding="utf-8", newline="\n") as internal_handle,
            ):
                make_handle.write("# Dependencies file generated by depcache.\n\n")
                internal_handle.write("# Internal dependencies file generated by depcache.\n\n")
                write_dependencies(dependencies, make_handle, internal_handle, self._style)
            make_tmp.replace(make_path)
            # internal file last: its timestamp marks every depfile read so far as consumed
            internal_tmp.replace(internal_path)
        finally:
            make_tmp.unlink(missing_ok=True)
            internal_tmp.unlink(missing_ok=True)

    def _log(self, operation: str, status: str, metadata: dict[str, object]) -> None:
        if not self._config.audit_enabled:
            return
        self._audit_logger.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                operation=operation,
                status=status,
                internal_depfile=os.fspath(self._config.internal_depfile),
                metadata=dict(metadata),
            )
        )
