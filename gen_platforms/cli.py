"""Command line interface for gen_platforms."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable
import sys

import yaml

from core.command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner
from core.console import Console

from .src.config import expand_config, load_config
from .src.generate import GenerateOptions, generate_platforms


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(
        prog="gen_platforms",
        description="Generate Flutter platform directories from an app config",
    )
    parser.add_argument("--config", default="app.toml", help="App config file (.toml/.json/.yaml/.pkl)")
    parser.add_argument("--project-dir", default=".", help="Flutter project directory")
    parser.add_argument("--flutter", default="flutter", help="Flutter executable")
    parser.add_argument("--create", action="store_true", help="Run flutter create before generating")
    parser.add_argument("--clean", action="store_true", help="Remove the existing android/ directory first")
    parser.add_argument("--dry-run", action="store_true", help="Print actions without changing anything")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug output")
    return parser.parse_args(list(argv))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = Console.from_flags(verbose=args.verbose, dry_run=args.dry_run)

    project_dir = Path(args.project_dir).expanduser().resolve()
    config_path = Path(args.config).expanduser()
    if not config_path.is_absolute() and not config_path.exists():
        candidate = project_dir / config_path
        if candidate.exists():
            config_path = candidate

    runner: CommandRunner
    if args.dry_run:
        runner = RecordingCommandRunner()
    else:
        runner = SubprocessCommandRunner()

    try:
        # Pkl configs are evaluated for real even in dry-run mode.
        cfg = expand_config(load_config(config_path, SubprocessCommandRunner()))
        console.debug(f"Loaded config from {config_path}")
        options = GenerateOptions(
            project_dir=project_dir,
            flutter=args.flutter,
            create=args.create,
            clean=args.clean,
            dry_run=args.dry_run,
        )
        generate_platforms(cfg, options, runner, console)
    except (OSError, TypeError, ValueError, RuntimeError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted(workspace=project_dir):
            print(line)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
