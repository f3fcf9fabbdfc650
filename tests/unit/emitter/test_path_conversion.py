from __future__ import annotations

from pathlib import Path

from depcache.emitter import MakefileStyle, make_escape


def test_make_escape_special_characters() -> None:
    assert make_escape("my dir/a$b#c.h") == "my\\ dir/a$$b\\#c.h"
    assert make_escape("C:\\src\\a.h") == "C:/src/a.h"


def test_paths_under_shared_root_become_relative() -> None:
    style = MakefileStyle(
        build_dir=Path("/work/build"),
        relative_roots=(Path("/work"),),
    )

    assert style.convert("/work/src/a.c") == "../src/a.c"
    assert style.convert("/work/build/gen/config.h") == "gen/config.h"


def test_paths_outside_roots_stay_absolute() -> None:
    style = MakefileStyle(
        build_dir=Path("/work/build"),
        relative_roots=(Path("/work/src"), Path("/work/build")),
    )

    assert style.convert("/usr/include/stdio.h") == "/usr/include/stdio.h"
    assert style.convert("/work/src/a.c") == "/work/src/a.c"
    assert style.convert("/work/build/gen.h") == "gen.h"
    assert style.convert("relative/a.h") == "relative/a.h"
