"""Reader for make-style depfiles emitted by gcc-compatible compilers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class GccDependency:
    """One ``rules: paths`` record of a make-style depfile."""

    rules: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)


def read_gcc_depfile(path: str | os.PathLike[str]) -> list[GccDependency] | None:
    """Read and parse a depfile; return None when it cannot be read or decoded."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return parse_gcc_depfile(text)


def parse_gcc_depfile(text: str) -> list[GccDependency]:
    """Parse depfile text into rule records in file order."""
    scanner = _DepfileScanner(text.replace("\r\n", "\n"))
    return scanner.scan()


class _DepfileScanner:
    """Character scanner handling make escapes, comments and continuations."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._token: list[str] = []
        self._has_token = False
        self._current = GccDependency()
        self._in_paths = False
        self._entries: list[GccDependency] = []

    def scan(self) -> list[GccDependency]:
        while True:
            char = self._peek()
            if char is None:
                break
            self._pos += 1
            if char == "\\":
                self._scan_backslash()
            elif char == "$" and self._peek() == "$":
                self._pos += 1
                self._append("$")
            elif char == "#" and not self._has_token:
                self._skip_comment()
            elif char == ":" and self._is_rule_separator():
                self._flush_token()
                self._in_paths = True
            elif char == "\n":
                self._flush_token()
                self._end_rule()
            elif char in " \t\r\f\v":
                self._flush_token()
            else:
                self._append(char)
        self._flush_token()
        self._end_rule()
        return self._entries

    def _scan_backslash(self) -> None:
        following = self._peek()
        if following == "\n":
            self._pos += 1
            self._flush_token()
        elif following in (" ", "#"):
            self._pos += 1
            self._append(following)
        else:
            self._append("\\")

    def _skip_comment(self) -> None:
        while True:
            char = self._peek()
            if char is None or char == "\n":
                return
            self._pos += 1
            if char == "\\" and self._peek() == "\n":
                self._pos += 1

    def _is_rule_separator(self) -> bool:
        if self._in_paths:
            return False
        following = self._peek()
        # drive letter, e.g. C:\dir or C:/dir
        if len(self._token) == 1 and self._token[0].isalpha() and following in ("\\", "/"):
            return False
        return True

    def _append(self, char: str) -> None:
        self._token.append(char)
        self._has_token = True

    def _flush_token(self) -> None:
        if not self._has_token:
            return
        token = "".join(self._token)
        self._token = []
        self._has_token = False
        if self._in_paths:
            self._current.paths.append(token)
        else:
            self._current.rules.append(token)

    def _end_rule(self) -> None:
        if self._in_paths and self._current.rules:
            self._current.paths = _dedupe(self._current.paths)
            self._entries.append(self._current)
        self._current = GccDependency()
        self._in_paths = False

    def _peek(self) -> str | None:
        if self._pos >= len(self._text):
            return None
        return self._text[self._pos]


def _dedupe(paths: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in paths:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
