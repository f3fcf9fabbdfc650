"""Reconcile the internal dependency cache against compiler depfiles."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import TextIO

from depcache.cache import load_internal_depfile
from depcache.depfile import read_flat_listing, read_gcc_depfile
from depcache.filters import NO_FILTER, PathFilter
from depcache.models import CompileRecord, DependencyMap, DepfileFormat
from depcache.timestamps import FileTime


@dataclass(slots=True, frozen=True)
class ReconcileProfile:
    """Deterministic counters for one reconciliation pass."""

    records: int
    missing_depfiles: int
    up_to_date: int
    reparsed: int
    parse_failures: int
    force_reload: bool


def check_dependencies(
    internal_depfile: str | os.PathLike[str],
    records: Sequence[CompileRecord],
    dependencies: DependencyMap,
    path_filter: PathFilter = NO_FILTER,
    verbose: bool = False,
    out: TextIO | None = None,
    profile: dict[str, object] | None = None,
) -> bool:
    """Refresh ``dependencies`` from depfiles newer than the internal cache.

    Returns True when no record needed reparsing. Reparsed entries replace the
    cached list for their target and always start with the record's source.
    """
    state = load_internal_depfile(internal_depfile, dependencies)
    force_reload = state.force_reload

    status = True
    missing = 0
    up_to_date = 0
    reparsed = 0
    failures = 0
    staged: DependencyMap = {}
    for record in records:
        depfile_time = FileTime.load(record.depfile)
        if depfile_time is None:
            missing += 1
            continue
        if not force_reload and state.timestamp is not None:
            if not depfile_time.newer(state.timestamp):
                up_to_date += 1
                continue

        status = False
        reparsed += 1
        if verbose:
            stream = out if out is not None else sys.stdout
            stream.write(
                f'Dependencies file "{record.depfile}" is newer than depends file '
                f'"{os.fspath(internal_depfile)}".\n'
            )

        depends = _parse_record(record, path_filter)
        if depends is None:
            failures += 1
            continue
        staged[record.target] = _normalize(depends, record.source, path_filter)

    dependencies.update(staged)

    if profile is not None:
        payload = ReconcileProfile(
            records=len(records),
            missing_depfiles=missing,
            up_to_date=up_to_date,
            reparsed=reparsed,
            parse_failures=failures,
            force_reload=force_reload,
        )
        profile.update(asdict(payload))
    return status


def _parse_record(record: CompileRecord, path_filter: PathFilter) -> list[str] | None:
    if record.format is DepfileFormat.FLAT_LISTING:
        listed = read_flat_listing(record.depfile)
        if listed is None:
            return None
        if not path_filter.active:
            return [record.source, *listed]
        return listed

    entries = read_gcc_depfile(record.depfile)
    if not entries:
        return None
    # compilers emit one rule per depfile
    depends = list(entries[0].paths)
    if not depends:
        return None
    # some drivers list the object itself as first dependency
    if depends[0] == record.target:
        del depends[0]
    return depends


def _normalize(depends: list[str], source: str, path_filter: PathFilter) -> list[str]:
    if not depends or depends[0] != source:
        depends = [dep for dep in depends if dep != source]
        if not path_filter.active:
            depends.insert(0, source)
    elif path_filter.active:
        del depends[0]

    if path_filter.active:
        depends = [dep for dep in depends if not path_filter.is_invalid(dep)]
        depends.insert(0, source)
    return depends
