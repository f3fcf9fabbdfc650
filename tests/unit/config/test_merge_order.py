from __future__ import annotations

from pathlib import Path

from depcache.config import CliOverrides, load_effective_config


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.build_dir == tmp_path
    assert config.internal_depfile == tmp_path / "compiler_depend.internal"
    assert config.make_depfile == tmp_path / "compiler_depend.make"
    assert config.makefile.line_continue == "\\"
    assert config.makefile.relative_roots == (tmp_path,)
    assert config.depends.in_project_only is False
    assert config.depends.verbose is False
    assert config.audit_enabled is True


def test_config_file_then_cli_overrides(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "build").mkdir()
    build = tmp_path / "build"
    (build / "depcache.toml").write_text(
        "\n".join(
            [
                "[paths]",
                'source_dir = "../src"',
                'internal_depfile = "deps/compiler_depend.internal"',
                "[makefile]",
                'line_continue = "&"',
                "[depends]",
                "in_project_only = true",
                "verbose = true",
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(
        build, overrides=CliOverrides(verbose=False, make_depfile=build / "custom.make")
    )

    assert config.source_dir == tmp_path / "src"
    assert config.internal_depfile == build / "deps" / "compiler_depend.internal"
    assert config.make_depfile == build / "custom.make"
    assert config.makefile.line_continue == "&"
    assert config.makefile.relative_roots == (tmp_path / "src", build)
    assert config.project_roots == (tmp_path / "src", build)
    assert config.depends.in_project_only is True
    assert config.depends.verbose is False


def test_public_dict_snapshot(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path, overrides=CliOverrides(audit_enabled=False))

    snapshot = config.to_public_dict()

    assert snapshot["audit"] == {"enabled": False}
    assert snapshot["source_dir"] is None
    assert snapshot["makefile"] == {
        "line_continue": "\\",
        "relative_roots": [str(tmp_path)],
    }
