"""Typed models for compile records and cached dependency lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

DependencyMap = dict[str, list[str]]

RECORD_ARITY = 4


class DepfileFormat(str, Enum):
    """Format of a compiler-generated dependency file."""

    GCC = "gcc"
    FLAT_LISTING = "msvc"

    @classmethod
    def from_token(cls, token: str) -> DepfileFormat:
        """Map a generator format token; anything but ``msvc`` is make-style."""
        if token == cls.FLAT_LISTING.value:
            return cls.FLAT_LISTING
        return cls.GCC


@dataclass(slots=True, frozen=True)
class CompileRecord:
    """Dependency-tracking descriptor for one compiled translation unit."""

    source: str
    target: str
    format: DepfileFormat
    depfile: str


def records_from_flat(values: Sequence[str]) -> tuple[CompileRecord, ...]:
    """Group a flat ``source, target, format, depfile`` batch into records."""
    if len(values) % RECORD_ARITY != 0:
        raise ValueError(
            f"Flat record batch length {len(values)} is not a multiple of {RECORD_ARITY}."
        )
    records: list[CompileRecord] = []
    for start in range(0, len(values), RECORD_ARITY):
        source, target, token, depfile = values[start : start + RECORD_ARITY]
        records.append(
            CompileRecord(
                source=source,
                target=target,
                format=DepfileFormat.from_token(token),
                depfile=depfile,
            )
        )
    return tuple(records)
