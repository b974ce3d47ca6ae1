"""
Invocation model and execution for ``cmd_run``.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from core.command_runner import (
    ChildFailure,
    CommandRunner,
    ConfigurationError,
    SpawnError,
    SubprocessCommandRunner,
)
from core.console import Console


@dataclass(frozen=True)
class Invocation:
    """A single request to run one external command."""

    command: str
    args: Tuple[str, ...] = ()
    cwd: Optional[Path] = None
    log: Optional[Path] = None
    echo: bool = True

    @classmethod
    def build(
        cls,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Optional[str] = None,
        log: Optional[str] = None,
        echo: bool = True,
    ) -> "Invocation":
        if not command:
            raise ConfigurationError("No command given")
        return cls(
            command=command,
            args=tuple(args),
            cwd=Path(cwd) if cwd else None,
            log=Path(log) if log else None,
            echo=echo,
        )

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.command, *self.args)


def run_invocation(
    invocation: Invocation,
    *,
    runner: Optional[CommandRunner] = None,
    console: Optional[Console] = None,
) -> int:
    """Run ``invocation`` once and return the exit status for the wrapper.

    The child's exit code is passed through unchanged; spawn failures map to
    126/127 and configuration errors to 2.
    """
    runner = runner or SubprocessCommandRunner()
    console = console or Console(level="error")

    console.debug(f"Running {runner.format_command(invocation.argv)}")
    if invocation.cwd:
        console.debug(f"Working directory: {invocation.cwd}")
    if invocation.log:
        console.debug(f"Appending output to: {invocation.log}")

    try:
        result = runner.run(
            list(invocation.argv),
            cwd=invocation.cwd,
            log=invocation.log,
            stream=invocation.echo,
            check=True,
        )
    except ConfigurationError as e:
        console.error(str(e))
        return e.exit_code
    except SpawnError as e:
        console.error(str(e))
        return e.exit_code
    except ChildFailure as e:
        console.error(e.summary)
        return e.exit_code

    console.debug(f"Exited with status {result.exit_status}")
    return result.exit_status
