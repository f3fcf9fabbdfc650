from __future__ import annotations

from pathlib import Path

import pytest

from depcache.config import load_effective_config


def _write_config(build_dir: Path, lines: list[str]) -> None:
    (build_dir / "depcache.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_bool_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[depends]", 'verbose = "yes"'])

    with pytest.raises(ValueError, match="depends.verbose"):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ['makefile = "not-a-table"'])

    with pytest.raises(ValueError, match="section 'makefile'"):
        load_effective_config(tmp_path)


def test_empty_line_continue_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[makefile]", 'line_continue = ""'])

    with pytest.raises(ValueError, match="makefile.line_continue"):
        load_effective_config(tmp_path)


def test_relative_roots_must_be_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[makefile]", "relative_roots = [1, 2]"])

    with pytest.raises(ValueError, match="makefile.relative_roots"):
        load_effective_config(tmp_path)
