from __future__ import annotations

from pathlib import Path

from depcache.depfile import parse_gcc_depfile, read_gcc_depfile


def test_single_rule_with_continuations() -> None:
    entries = parse_gcc_depfile("a.o: a.c \\\n  include/b.h \\\n  include/c.h\n")

    assert len(entries) == 1
    assert entries[0].rules == ["a.o"]
    assert entries[0].paths == ["a.c", "include/b.h", "include/c.h"]


def test_escapes_and_comments() -> None:
    text = "# generated\nout\\ dir/a.o: my\\ file.c cost$$.h hash\\#.h # trailing\n"
    entries = parse_gcc_depfile(text)

    assert entries[0].rules == ["out dir/a.o"]
    assert entries[0].paths == ["my file.c", "cost$.h", "hash#.h"]


def test_crlf_line_endings_and_multiple_rules() -> None:
    entries = parse_gcc_depfile("a.o: a.c b.h\r\nb.h:\r\n")

    assert [entry.rules for entry in entries] == [["a.o"], ["b.h"]]
    assert entries[0].paths == ["a.c", "b.h"]
    assert entries[1].paths == []


def test_windows_drive_letters_are_not_separators() -> None:
    entries = parse_gcc_depfile("C:/build/a.obj: C:\\src\\a.c D:/inc/b.h\n")

    assert entries[0].rules == ["C:/build/a.obj"]
    assert entries[0].paths == ["C:\\src\\a.c", "D:/inc/b.h"]


def test_duplicate_paths_keep_first_occurrence() -> None:
    entries = parse_gcc_depfile("a.o: a.c b.h a.c b.h c.h\n")

    assert entries[0].paths == ["a.c", "b.h", "c.h"]


def test_lines_without_colon_are_ignored() -> None:
    assert parse_gcc_depfile("garbage line\n") == []
    assert parse_gcc_depfile("") == []


def test_read_missing_file_returns_none(tmp_path: Path) -> None:
    assert read_gcc_depfile(tmp_path / "missing.d") is None


def test_read_latin1_depfile_returns_none(tmp_path: Path) -> None:
    depfile = tmp_path / "a.d"
    depfile.write_bytes(b"a.o: a.c caf\xe9.h\n")

    assert read_gcc_depfile(depfile) is None
