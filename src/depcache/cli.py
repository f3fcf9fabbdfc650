"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from depcache.config import CliOverrides, load_effective_config
from depcache.update import DependsUpdater, RecordsFileError, load_records


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one dependency pass."""
    parser = argparse.ArgumentParser(prog="depcache")
    parser.add_argument("--build-dir", required=False, default=".")
    parser.add_argument("--source-dir", required=False, default=None)
    parser.add_argument("--internal-depfile", required=False, default=None)
    parser.add_argument("--make-depfile", required=False, default=None)
    parser.add_argument("--verbose", action="store_true", default=None)
    parser.add_argument("--in-project-only", action="store_true", default=None)
    parser.add_argument("--no-audit", action="store_true", default=False)
    parser.add_argument("--history", type=int, required=False, default=10)
    parser.add_argument("--operation", choices=("update", "clear"), required=False, default=None)
    parser.add_argument("command", choices=("update", "clear", "show"))
    parser.add_argument("records", nargs="?", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one depcache command and return the process exit status."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    overrides = CliOverrides(
        source_dir=Path(args.source_dir) if args.source_dir is not None else None,
        internal_depfile=Path(args.internal_depfile) if args.internal_depfile else None,
        make_depfile=Path(args.make_depfile) if args.make_depfile else None,
        in_project_only=args.in_project_only,
        verbose=args.verbose,
        audit_enabled=False if args.no_audit else None,
    )
    try:
        config = load_effective_config(Path(args.build_dir), overrides=overrides)
    except ValueError as error:
        sys.stderr.write(f"depcache: {error}\n")
        return 2

    updater = DependsUpdater(config, out=sys.stdout)
    if args.command == "show":
        payload = {
            "config": config.to_public_dict(),
            "dependencies": updater.cached(),
            "history": updater.audit_logger.read(operation=args.operation, limit=args.history),
        }
        sys.stdout.write(f"{json.dumps(payload, indent=2, sort_keys=True)}\n")
        return 0

    if args.records is None:
        sys.stderr.write(f"depcache: '{args.command}' requires a records file.\n")
        return 2
    try:
        records = load_records(Path(args.records))
    except RecordsFileError as error:
        sys.stderr.write(f"depcache: {error.reason} {error.hint}\n")
        return 2

    if args.command == "clear":
        removed = updater.clear(records)
        sys.stdout.write(f"removed {removed} depfile(s)\n")
        return 0

    result = updater.update(records)
    sys.stdout.write("up-to-date\n" if result.up_to_date else "updated\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
