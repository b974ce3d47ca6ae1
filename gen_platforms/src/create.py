"""``flutter create`` invocation and project directory housekeeping."""
from __future__ import annotations

from pathlib import Path
from typing import List, Mapping
import shutil

from core.command_runner import CommandRunner
from core.console import Console
from core.pubspec import set_top_level_field

from .config import AppConfig


def flutter_create_command(flutter: str, project_dir: Path, cfg: AppConfig) -> List[str]:
    command = [flutter, "create", "--project-name", cfg.project_name]
    if cfg.create.platforms:
        command.extend(["--platforms", ",".join(cfg.create.platforms)])
    if cfg.create.android_language:
        command.extend(["--android-language", cfg.create.android_language])
    if cfg.org:
        command.extend(["--org", cfg.org])
    if cfg.description:
        command.extend(["--description", cfg.description])
    command.append(str(project_dir))
    return command


def run_flutter_create(runner: CommandRunner, flutter: str, project_dir: Path, cfg: AppConfig) -> None:
    """Run ``flutter create`` with streamed output; raises on failure."""
    runner.run(flutter_create_command(flutter, project_dir, cfg), stream=True, note="flutter create")


def remove_platform_dir(path: Path, console: Console) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise RuntimeError(
            f"Failed to remove directory: {path}. Close programs holding files in it and retry. ({e})"
        ) from e
    console.info(f"Removed {path}")


def apply_pubspec_overrides(pubspec: Path, fields: Mapping[str, str], console: Console) -> bool:
    """Rewrite top-level pubspec fields; returns ``False`` when there is no pubspec."""
    if not fields:
        return True
    if not pubspec.exists():
        console.info(f"{pubspec} not found; pubspec overrides skipped")
        return False
    content = pubspec.read_bytes().decode("utf-8")
    for key, value in fields.items():
        content = set_top_level_field(content, key, value)
    pubspec.write_bytes(content.encode("utf-8"))
    console.info(f"Updated {pubspec}: {', '.join(sorted(fields))}")
    return True
