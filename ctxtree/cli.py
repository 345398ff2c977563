"""Command-line front door for ctxtree.

Parses CLI options, resolves the project root, loads settings and the
persisted selection, then dispatches one command (the interactive picker by
default).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from . import config
from .config import load_config, load_settings, save_config, settings_to_config
from .errors import CtxTreeError
from .exclusion import to_relative_posix
from .picker import PickerApp, check_marker
from .workspace import ContextWorkspace


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctxtree",
        description="Select project files and compile them into one context document.",
    )
    parser.add_argument("--root", default=None, help="Project root. Defaults to current directory.")
    parser.add_argument("--state-file", default=None, help="Selection state file (default: per-user state dir).")
    parser.add_argument("--output", default=None, help="Output file, overriding the configured output_file.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.add_parser("pick", help="Interactive picker (default).")
    ls_parser = commands.add_parser("ls", help="List a directory with selection markers.")
    ls_parser.add_argument("path", nargs="?", default=None)
    toggle_parser = commands.add_parser("toggle", help="Toggle files or directories.")
    toggle_parser.add_argument("paths", nargs="+")
    commands.add_parser("select-all", help="Select every non-excluded file.")
    commands.add_parser("deselect-all", help="Clear the selection.")
    commands.add_parser("prune", help="Drop selected paths that no longer exist.")
    commands.add_parser("status", help="Print selected files in selection order.")
    compile_parser = commands.add_parser("compile", help="Write the context document.")
    compile_parser.add_argument("--stdout", action="store_true", help="Print the document instead of writing it.")
    config_parser = commands.add_parser("config", help="Print effective settings as JSON.")
    config_parser.add_argument("--init", action="store_true", help="Write defaults to the user config file.")
    return parser


def _print_lines(lines: list[str]) -> None:
    for line in lines:
        sys.stdout.write(line + "\n")


def _run_command(args: argparse.Namespace, workspace: ContextWorkspace) -> None:
    command = args.command or "pick"
    root = workspace.root

    if command == "pick":
        if not sys.stdin.isatty() or not sys.stdout.isatty():
            raise SystemExit("The interactive picker needs a terminal; use a subcommand instead.")
        PickerApp(workspace).run()
        return

    if command == "ls":
        directory = Path(args.path) if args.path else None
        _print_lines(
            [f"{check_marker(entry.checked_state)} {entry.label}" for entry in workspace.list_children(directory)]
        )
        return

    if command == "toggle":
        for raw_path in args.paths:
            change = workspace.toggle_path(Path(raw_path))
            sys.stdout.write(f"{raw_path}: +{len(change.added)} -{len(change.removed)}\n")
        return

    if command == "select-all":
        change = workspace.select_all()
        sys.stdout.write(f"Selected {len(change.added)} files ({len(workspace.store)} total).\n")
        return

    if command == "deselect-all":
        change = workspace.deselect_all()
        sys.stdout.write(f"Deselected {len(change.removed)} files.\n")
        return

    if command == "prune":
        removed = workspace.prune_missing()
        _print_lines([f"removed {path}" for path in removed])
        return

    if command == "status":
        _print_lines([to_relative_posix(entry.path, root) for entry in workspace.get_all_checked_files()])
        return

    if command == "compile":
        if args.stdout:
            result = workspace.compile(write=False)
            sys.stdout.write(result.document.text)
            return
        result = workspace.compile()
        sys.stdout.write(f"Context successfully written to {result.output_path}\n")
        return

    if command == "config":
        if args.init:
            if load_config():
                raise SystemExit(f"Config already exists: {config.CONFIG_PATH}")
            save_config(settings_to_config(load_settings()))
            sys.stdout.write(f"Wrote {config.CONFIG_PATH}\n")
            return
        sys.stdout.write(json.dumps(settings_to_config(workspace.settings), indent=2) + "\n")
        return

    raise SystemExit(f"Unknown command: {command}")


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and run one command against the project root.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used as the root.
    """
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging(args.verbose, args.quiet)

    if default_path is None:
        default_path = Path.cwd()
    root = Path(args.root or default_path)
    if not root.exists():
        raise SystemExit(f"Path not found: {root}")
    if not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")

    settings = load_settings(root)
    if args.output:
        settings = replace(settings, output_file=str(Path(args.output).absolute()))
    state_path = Path(args.state_file) if args.state_file else None
    workspace = ContextWorkspace.open(root, settings, state_path=state_path)

    try:
        _run_command(args, workspace)
    except CtxTreeError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
