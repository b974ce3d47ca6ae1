"""Web project build and asset copy steps.

Supports any package manager that understands ``<pm> install`` and
``<pm> <script>`` (pnpm, npm, yarn, bun).
"""
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional
import shutil

from core.command_runner import ChildFailure, CommandRunner, SpawnError, resolve_command
from core.console import Console


DEFAULT_PACKAGE_MANAGER = "pnpm"
DEFAULT_BUILD_COMMAND = "build"
DEFAULT_OUTPUT_DIR = "build"


def find_package_manager(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    path = resolve_command(name, env=env)
    if path is None:
        raise FileNotFoundError(f"{name} not found in PATH. Please install {name} or ensure it's in your PATH.")
    return path


def _run_step(runner: CommandRunner, command: list[str], src_dir: Path, label: str) -> None:
    try:
        runner.run(command, cwd=src_dir, stream=True, note=label)
    except SpawnError as e:
        raise RuntimeError(f"Failed to run {label}: {e}") from e
    except ChildFailure as e:
        raise RuntimeError(f"{label} failed ({e.summary})") from e


def build_web_project(
    runner: CommandRunner,
    src_dir: Path,
    console: Console,
    *,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    build_command: str = DEFAULT_BUILD_COMMAND,
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """Run ``<pm> install`` then ``<pm> <build_command>`` inside ``src_dir``."""

    console.info(f"Building web project at: {src_dir}")
    if not src_dir.is_dir():
        raise FileNotFoundError(f"Source directory does not exist: {src_dir}")

    pm_path = find_package_manager(package_manager, env)
    console.info(f"Using package manager: {package_manager} ({pm_path})")

    _run_step(runner, [pm_path, "install"], src_dir, f"{package_manager} install")
    _run_step(runner, [pm_path, build_command], src_dir, f"{package_manager} {build_command}")
    console.info("Build completed successfully")


def copy_assets(src_dir: Path, dst_dir: Path, console: Console, *, output_dir: str = DEFAULT_OUTPUT_DIR) -> int:
    """Replace ``dst_dir`` with a copy of ``<src_dir>/<output_dir>``.

    Returns the number of files copied.
    """

    build_dir = src_dir / output_dir
    if not build_dir.is_dir():
        raise FileNotFoundError(f"Build output not found: {build_dir}. Expected directory: {output_dir}")

    console.info(f"Copying assets from {build_dir} to {dst_dir}")
    if dst_dir.exists():
        try:
            shutil.rmtree(dst_dir)
        except OSError as e:
            raise RuntimeError(f"Failed to remove destination: {dst_dir} ({e})") from e
    dst_dir.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(build_dir, dst_dir)

    copied = sum(1 for path in dst_dir.rglob("*") if path.is_file())
    console.info(f"Copied {copied} file(s): {build_dir} -> {dst_dir}")
    return copied
