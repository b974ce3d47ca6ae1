"""Utilities for executing external commands with optional logging and dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import shutil
import signal
import stat
import subprocess
import sys
import threading


EXIT_USAGE = 2
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
EXIT_SIGNAL_BASE = 128

_CHUNK_SIZE = 64 * 1024


def exit_status(returncode: int) -> int:
    """Map a :mod:`subprocess` return code to a shell-style exit status."""

    if returncode < 0:
        return EXIT_SIGNAL_BASE - returncode
    return returncode


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return f"signal {number}"


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    streamed: bool = False
    log: Path | None = None

    @property
    def signaled(self) -> bool:
        return self.returncode < 0

    @property
    def exit_status(self) -> int:
        return exit_status(self.returncode)


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandError(RuntimeError):
    """Base class for failures while preparing or running a command."""

    exit_code = 1


class ConfigurationError(CommandError):
    """Raised when runner options are invalid; nothing has been spawned."""

    exit_code = EXIT_USAGE


class SpawnError(CommandError):
    """Raised when the child process could not be started at all."""

    def __init__(self, command: Sequence[str], reason: str, *, exit_code: int = EXIT_NOT_FOUND):
        name = str(command[0]) if command else "<empty>"
        super().__init__(f"{name}: {reason}")
        self.command = list(command)
        self.exit_code = exit_code


class ChildFailure(CommandError):
    """Raised when a started command exits non-zero or is killed by a signal."""

    def __init__(self, result: CommandResult):
        command_line = format_command(result.command)
        if result.signaled:
            summary = f"Command terminated by {_signal_name(-result.returncode)}: {command_line}"
        else:
            summary = f"Command failed with exit code {result.returncode}: {command_line}"

        if result.log is not None:
            message = f"{summary}\noutput appended to {result.log}"
        elif result.streamed:
            message = f"{summary}\nstdout/stderr already streamed above."
        else:
            message = (
                f"{summary}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        super().__init__(message)
        self.summary = summary
        self.result = result
        self.exit_code = result.exit_status or 1


def ensure_working_directory(cwd: Path | str | None) -> Path | None:
    """Return ``cwd`` as a path after checking it is an existing directory."""

    if cwd is None:
        return None
    path = Path(cwd)
    if not path.exists():
        raise ConfigurationError(f"Working directory does not exist: {path}")
    if not path.is_dir():
        raise ConfigurationError(f"Working directory is not a directory: {path}")
    return path


def ensure_log_destination(log: Path | str) -> Path:
    """Validate that ``log`` can be opened for appending without blocking."""

    path = Path(log)
    if path.exists():
        mode = path.stat().st_mode
        if stat.S_ISDIR(mode):
            raise ConfigurationError(f"Log path is a directory: {path}")
        if stat.S_ISFIFO(mode):
            raise ConfigurationError(f"Log path is a named pipe: {path}")
    return path


def resolve_command(
    command: str,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> str | None:
    """Locate ``command`` the way a shell would, or return ``None``.

    Names containing a path separator are taken relative to ``cwd``; bare names
    are looked up on ``PATH`` (``PATHEXT`` applies on Windows).
    """

    separators = [os.sep] + ([os.altsep] if os.altsep else [])
    if any(sep in command for sep in separators):
        candidate = Path(command)
        if not candidate.is_absolute() and cwd is not None:
            candidate = cwd / candidate
        return str(candidate.absolute()) if candidate.is_file() else None

    search_path = env.get("PATH") if env is not None else None
    return shutil.which(command, path=search_path)


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
        log: Path | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return format_command(command)


class _LockedSink:
    """Serializes writes from several reader threads into one binary handle."""

    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        with self._lock:
            self._handle.write(data)
            self._handle.flush()


class _StreamSink:
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle

    def write(self, data: bytes) -> None:
        self._handle.write(data)
        self._handle.flush()


def _pump(source: BinaryIO, sinks: List[_LockedSink | _StreamSink]) -> None:
    """Copy ``source`` into every sink until EOF."""

    while True:
        chunk = source.read1(_CHUNK_SIZE)  # type: ignore[attr-defined]
        if not chunk:
            break
        for sink in list(sinks):
            try:
                sink.write(chunk)
            except (BrokenPipeError, ValueError):
                # Reader went away; keep draining so the child never blocks.
                sinks.remove(sink)


def _binary_stream(stream: object) -> BinaryIO:
    return getattr(stream, "buffer", stream)  # type: ignore[return-value]


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`.

    ``stdout`` and ``stderr`` are the binary terminal streams used when output
    is both streamed and logged; they default to the interpreter's streams.
    """

    def __init__(self, *, stdout: BinaryIO | None = None, stderr: BinaryIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def _finalize(self, result: CommandResult, *, check: bool) -> CommandResult:
        if check and result.returncode != 0:
            raise ChildFailure(result)
        return result

    @staticmethod
    def _flush_terminal() -> None:
        for stream in (sys.stdout, sys.stderr):
            if stream is not None:
                stream.flush()

    @staticmethod
    def _wait(process: subprocess.Popen) -> int:
        try:
            return process.wait()
        except KeyboardInterrupt:
            # The child shares our process group and received the interrupt too.
            return process.wait()

    def _spawn(self, argv: List[str], *, cwd: Path | None, env: Dict[str, str] | None, **kwargs) -> subprocess.Popen:
        try:
            return subprocess.Popen(argv, cwd=str(cwd) if cwd else None, env=env, **kwargs)
        except FileNotFoundError as exc:
            raise SpawnError(argv, f"command not found ({exc.strerror})") from exc
        except PermissionError as exc:
            raise SpawnError(argv, "permission denied", exit_code=EXIT_NOT_EXECUTABLE) from exc
        except OSError as exc:
            raise SpawnError(argv, f"cannot execute ({exc})", exit_code=EXIT_NOT_EXECUTABLE) from exc

    def prepare(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        log: Path | None = None,
    ) -> List[str]:
        """Validate ``cwd`` and ``log``, then resolve the executable; nothing is spawned."""

        if not command:
            raise ConfigurationError("No command given")
        workdir = ensure_working_directory(cwd)
        if log is not None:
            ensure_log_destination(log)
        executable = resolve_command(str(command[0]), cwd=workdir, env=env)
        if executable is None:
            raise SpawnError(command, "command not found")
        return [executable, *(str(arg) for arg in command[1:])]

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
        log: Path | None = None,
    ) -> CommandResult:
        merged_env = self._merge_environment(env)
        argv = self.prepare(command, cwd=cwd, env=merged_env, log=log)
        if log is not None:
            return self._finalize(
                self._run_logged(command, argv, cwd=cwd, env=merged_env, stream=stream, log=log),
                check=check,
            )

        if not stream:
            process = self._spawn(
                argv,
                cwd=cwd,
                env=merged_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
            )
            try:
                stdout, stderr = process.communicate()
            except KeyboardInterrupt:
                process.wait()
                raise
            return self._finalize(
                CommandResult(
                    command=command,
                    returncode=process.returncode,
                    stdout=stdout,
                    stderr=stderr,
                ),
                check=check,
            )

        self._flush_terminal()
        process = self._spawn(argv, cwd=cwd, env=merged_env)
        returncode = self._wait(process)
        return self._finalize(
            CommandResult(
                command=command,
                returncode=returncode,
                stdout="",
                stderr="",
                streamed=True,
            ),
            check=check,
        )

    def _run_logged(
        self,
        command: Sequence[str],
        argv: List[str],
        *,
        cwd: Path | None,
        env: Dict[str, str] | None,
        stream: bool,
        log: Path,
    ) -> CommandResult:
        log_path = ensure_log_destination(log)
        created_dirs = [parent for parent in log_path.parents if not parent.exists()]
        existed = log_path.exists()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handle = log_path.open("ab")
        except OSError as exc:
            raise ConfigurationError(f"Cannot open log file {log_path}: {exc}") from exc

        try:
            with handle:
                if not stream:
                    process = self._spawn(argv, cwd=cwd, env=env, stdout=handle, stderr=subprocess.STDOUT)
                    returncode = self._wait(process)
                else:
                    returncode = self._tee(argv, cwd=cwd, env=env, handle=handle)
        except SpawnError:
            # Nothing ran, so leave the filesystem as it was.
            if not existed:
                log_path.unlink(missing_ok=True)
                for directory in created_dirs:
                    try:
                        directory.rmdir()
                    except OSError:
                        break
            raise

        return CommandResult(
            command=command,
            returncode=returncode,
            stdout="",
            stderr="",
            streamed=stream,
            log=log_path,
        )

    def _tee(self, argv: List[str], *, cwd: Path | None, env: Dict[str, str] | None, handle: BinaryIO) -> int:
        self._flush_terminal()
        log_sink = _LockedSink(handle)
        terminal_out = _StreamSink(self._stdout or _binary_stream(sys.stdout))
        terminal_err = _StreamSink(self._stderr or _binary_stream(sys.stderr))

        process = self._spawn(argv, cwd=cwd, env=env, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        readers = [
            threading.Thread(target=_pump, args=(process.stdout, [terminal_out, log_sink]), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, [terminal_err, log_sink]), daemon=True),
        ]
        for reader in readers:
            reader.start()

        returncode = self._wait(process)
        for reader in readers:
            reader.join()
        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                pipe.close()
        return returncode


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    stream: bool
    log: str | None = None


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them."""

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []

    @staticmethod
    def _record_entry(
        *,
        command: Sequence[str],
        cwd: Path | None,
        env: Mapping[str, str] | None,
        note: str | None,
        stream: bool,
        log: Path | None,
    ) -> RecordedCommand:
        return RecordedCommand(
            command=[str(part) for part in command],
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env else {},
            note=note,
            stream=stream,
            log=str(log) if log else None,
        )

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
        log: Path | None = None,
    ) -> CommandResult:
        if not command:
            raise ConfigurationError("No command given")
        ensure_working_directory(cwd)
        if log is not None:
            ensure_log_destination(log)
        self.commands.append(
            self._record_entry(command=command, cwd=cwd, env=env, note=note, stream=stream, log=log)
        )
        return CommandResult(command=command, returncode=0, stdout="", stderr="", log=log)

    def iter_commands(self) -> Iterable[RecordedCommand]:
        return iter(self.commands)

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            note = record.note
            parts: List[str] = ["[dry-run]"]
            if note:
                parts.append(note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            if record.log:
                parts.append(f"(log={record.log})")
            parts.append(cmd)
            yield " ".join(parts)


__all__ = [
    "ChildFailure",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "ConfigurationError",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "EXIT_SIGNAL_BASE",
    "EXIT_USAGE",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SpawnError",
    "SubprocessCommandRunner",
    "ensure_log_destination",
    "ensure_working_directory",
    "exit_status",
    "format_command",
    "resolve_command",
]
