"""Command line interface for web_build."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable
import sys

from core.command_runner import SubprocessCommandRunner
from core.console import Console

from .src.web import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PACKAGE_MANAGER,
    build_web_project,
    copy_assets,
)


def _add_build_options(parser: ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--package-manager",
        default=DEFAULT_PACKAGE_MANAGER,
        help="Package manager to use (pnpm, npm, yarn, bun)",
    )
    parser.add_argument(
        "-c", "--build-command",
        default=DEFAULT_BUILD_COMMAND,
        help="Package script that builds the project",
    )


def _add_copy_options(parser: ArgumentParser) -> None:
    parser.add_argument("-d", "--dst", required=True, help="Destination path for copied assets")
    parser.add_argument(
        "-o", "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help="Build output directory name inside the project (e.g. build, dist)",
    )


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="web_build", description="Build web projects and copy output to Flutter assets")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build the web project")
    build_parser.add_argument("-s", "--src", required=True, help="Path to the web project directory")
    _add_build_options(build_parser)

    copy_parser = subparsers.add_parser("copy", help="Copy built assets to the destination")
    copy_parser.add_argument("-s", "--src", required=True, help="Path to the web project directory")
    _add_copy_options(copy_parser)

    refresh_parser = subparsers.add_parser("refresh", help="Build the web project and copy its assets")
    refresh_parser.add_argument("-s", "--src", required=True, help="Path to the web project directory")
    _add_build_options(refresh_parser)
    _add_copy_options(refresh_parser)

    return parser.parse_args(list(argv))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = Console.from_flags(quiet=args.quiet)
    src_dir = Path(args.src)

    try:
        if args.command in {"build", "refresh"}:
            build_web_project(
                SubprocessCommandRunner(),
                src_dir,
                console,
                package_manager=args.package_manager,
                build_command=args.build_command,
            )
        if args.command in {"copy", "refresh"}:
            copy_assets(src_dir, Path(args.dst), console, output_dir=args.output_dir)
    except (OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
