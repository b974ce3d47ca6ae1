"""Orchestrates the platform generation steps for one Flutter project."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.command_runner import CommandRunner
from core.console import Console

from .android import process_android_platform
from .config import AppConfig, build_template_vars, pubspec_overrides
from .create import apply_pubspec_overrides, remove_platform_dir, run_flutter_create
from .windows import process_windows_platform


@dataclass
class GenerateOptions:
    project_dir: Path
    flutter: str = "flutter"
    create: bool = False
    clean: bool = False
    dry_run: bool = False


def generate_platforms(cfg: AppConfig, options: GenerateOptions, runner: CommandRunner, console: Console) -> None:
    """Run clean, create, pubspec, android and windows steps in order.

    In dry-run mode commands go to ``runner`` (a recording runner) and
    filesystem edits are reported instead of performed.
    """

    project_dir = options.project_dir
    android_dir = project_dir / "android"

    if options.clean:
        if options.dry_run:
            console.dry(f"Would remove {android_dir}")
        else:
            remove_platform_dir(android_dir, console)

    if options.create:
        console.info(f"Running flutter create for {cfg.project_name}")
        run_flutter_create(runner, options.flutter, project_dir, cfg)

    fields = pubspec_overrides(cfg)
    pubspec = project_dir / "pubspec.yaml"
    if options.dry_run:
        if fields:
            console.dry(f"Would update {pubspec}: {', '.join(sorted(fields))}")
    else:
        apply_pubspec_overrides(pubspec, fields, console)

    template_vars = build_template_vars(cfg)
    if options.dry_run:
        console.dry(f"Would generate {android_dir} with variables: {', '.join(sorted(template_vars))}")
    else:
        process_android_platform(project_dir, cfg.android, cfg.platforms_dir, template_vars, console)

    if cfg.windows is not None and cfg.windows.enabled:
        if options.dry_run:
            console.dry(f"Would configure {project_dir / 'windows'}")
        else:
            process_windows_platform(project_dir, cfg.windows, console)
