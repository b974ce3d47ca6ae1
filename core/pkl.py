"""Evaluate Pkl configuration files through the ``pkl`` CLI."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence
import json

from .command_runner import ChildFailure, CommandRunner, SpawnError
from .config_loader import ensure_mapping


# Older pkl releases only understand the long flag.
_FORMAT_FLAGS: Sequence[Sequence[str]] = (("-f", "json"), ("--format", "json"))


class PklError(RuntimeError):
    """Raised when ``pkl eval`` cannot produce the requested value."""


def _eval(runner: CommandRunner, pkl_cmd: str, args: Sequence[str], path: Path) -> str:
    try:
        result = runner.run([pkl_cmd, "eval", *args, str(path)], check=True)
    except SpawnError as exc:
        raise PklError(f"pkl is not available: {exc}") from exc
    except ChildFailure as exc:
        raise PklError(f"pkl eval failed: {exc.result.stderr.strip()}") from exc
    return result.stdout


def eval_json(runner: CommandRunner, path: Path, *, pkl_cmd: str = "pkl") -> Mapping[str, Any]:
    """Render ``path`` as JSON and decode it into a mapping."""

    last_error: PklError | None = None
    for flags in _FORMAT_FLAGS:
        try:
            output = _eval(runner, pkl_cmd, flags, path)
        except PklError as exc:
            last_error = exc
            continue
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise PklError(f"Failed to parse pkl output for {path}: {exc}") from exc
        return ensure_mapping(data, source=str(path))

    raise PklError(f"Failed to run pkl eval for {path}: {last_error}")


def eval_expression(runner: CommandRunner, path: Path, expression: str, *, pkl_cmd: str = "pkl") -> str:
    """Evaluate a single ``expression`` within ``path`` and return it as text."""

    output = _eval(runner, pkl_cmd, ("--expression", expression), path)
    return output.strip().strip('"')


__all__ = ["PklError", "eval_expression", "eval_json"]
