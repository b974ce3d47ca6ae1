"""Command line interface for cmd_run."""
from __future__ import annotations

from argparse import REMAINDER, ArgumentParser, Namespace
from typing import Iterable
import sys

from core.command_runner import CommandRunner, ConfigurationError, RecordingCommandRunner, SubprocessCommandRunner
from core.console import Console

from .src.invocation import Invocation, run_invocation


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(
        prog="cmd_run",
        description="Run a command, optionally in another directory and teeing its output to a log file",
    )
    parser.add_argument("--log", metavar="PATH", help="Append combined stdout/stderr of the command to this file")
    parser.add_argument("--cwd", metavar="PATH", help="Run the command with this working directory")
    parser.add_argument("--no-echo", dest="echo", action="store_false", help="Do not echo command output to the terminal")
    parser.add_argument("--dry-run", action="store_true", help="Validate options and print the command without running it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print diagnostics on stderr")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress the wrapper's own error messages")
    parser.add_argument("command", help="Command to run")
    parser.add_argument("args", nargs=REMAINDER, help="Arguments passed to the command")
    return parser.parse_args(list(argv))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = Console.from_flags(
        verbose=args.verbose,
        quiet=args.quiet,
        dry_run=args.dry_run,
        default="error",
        stream=sys.stderr,
    )

    try:
        invocation = Invocation.build(args.command, args.args, cwd=args.cwd, log=args.log, echo=args.echo)
    except ConfigurationError as e:
        console.error(str(e))
        return e.exit_code

    runner: CommandRunner
    if args.dry_run:
        runner = RecordingCommandRunner()
    else:
        runner = SubprocessCommandRunner()

    status = run_invocation(invocation, runner=runner, console=console)
    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted():
            print(line)
    return status


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
