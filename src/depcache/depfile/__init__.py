"""Compiler depfile readers."""

from .flat import read_flat_listing
from .gcc import GccDependency, parse_gcc_depfile, read_gcc_depfile

__all__ = ["GccDependency", "parse_gcc_depfile", "read_flat_listing", "read_gcc_depfile"]
