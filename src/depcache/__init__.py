"""Incremental compiler-dependency cache for Makefile-style builds."""

from .cache import CacheState, dump_internal_depfile, load_internal_depfile
from .cleanup import clear_dependencies
from .emitter import MakefileStyle, make_escape, write_dependencies
from .filters import NO_FILTER, PathFilter, PredicatePathFilter, ProjectTreeFilter
from .models import CompileRecord, DependencyMap, DepfileFormat, records_from_flat
from .reconcile import ReconcileProfile, check_dependencies
from .timestamps import FileTime

__all__ = [
    "CacheState",
    "CompileRecord",
    "DependencyMap",
    "DepfileFormat",
    "FileTime",
    "MakefileStyle",
    "NO_FILTER",
    "PathFilter",
    "PredicatePathFilter",
    "ProjectTreeFilter",
    "ReconcileProfile",
    "check_dependencies",
    "clear_dependencies",
    "dump_internal_depfile",
    "load_internal_depfile",
    "make_escape",
    "records_from_flat",
    "write_dependencies",
]
