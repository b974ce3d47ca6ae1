"""Android platform directory generation from ``platforms/android`` templates."""
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional
import shutil

from core.console import Console
from core.properties import update_properties
from core.template import extract_placeholders, render_placeholders

from .config import AndroidConfig


SKIP_FILES = frozenset({"keystore.jks", "key.properties.example"})
"""Files kept in the template tree but never copied into ``android/``."""

TEMPLATE_EXTENSIONS = frozenset({".kts", ".xml", ".properties"})
"""Suffixes whose contents receive ``{{var}}`` substitution."""

DEFAULT_PLATFORMS_DIR = "platforms"
GRADLE_WRAPPER_PROPERTIES = Path("gradle") / "wrapper" / "gradle-wrapper.properties"


def copy_with_templates(
    src: Path,
    dst: Path,
    variables: Mapping[str, str],
    console: Optional[Console] = None,
) -> int:
    """Recursively copy ``src`` onto ``dst`` rendering template files.

    Returns the number of files written.
    """
    dst.mkdir(parents=True, exist_ok=True)
    written = 0

    for entry in sorted(src.iterdir()):
        target = dst / entry.name
        if entry.is_dir():
            written += copy_with_templates(entry, target, variables, console)
            continue
        if entry.name in SKIP_FILES:
            continue

        if entry.suffix.lower() in TEMPLATE_EXTENSIONS and variables:
            content = entry.read_bytes().decode("utf-8")
            rendered = render_placeholders(content, variables)
            leftover = extract_placeholders(rendered)
            if leftover and console is not None:
                console.debug(f"Unresolved placeholders in {entry}: {', '.join(sorted(leftover))}")
            target.write_bytes(rendered.encode("utf-8"))
        else:
            shutil.copy2(entry, target)
        written += 1

    return written


def apply_gradle_wrapper_properties(path: Path, distribution_url: str) -> None:
    update_properties(path, {"distributionUrl": distribution_url})


def resolve_platforms_root(platforms_dir: Optional[str]) -> str:
    if platforms_dir is None or not platforms_dir.strip():
        return DEFAULT_PLATFORMS_DIR
    return platforms_dir.strip()


def process_android_platform(
    project_dir: Path,
    config: AndroidConfig,
    platforms_dir: Optional[str],
    template_vars: Mapping[str, str],
    console: Console,
) -> Path:
    """Generate ``<project>/android`` from the Android template tree."""

    android_dir = project_dir / "android"
    src_dir = project_dir / resolve_platforms_root(platforms_dir) / "android"
    if not src_dir.is_dir():
        raise FileNotFoundError(f"Android platform templates directory not found: {src_dir}")

    count = copy_with_templates(src_dir, android_dir, template_vars, console)
    console.debug(f"Copied {count} file(s) from {src_dir}")

    if config.distribution_url:
        apply_gradle_wrapper_properties(android_dir / GRADLE_WRAPPER_PROPERTIES, config.distribution_url)
        console.info(f"Gradle wrapper distributionUrl set to {config.distribution_url}")

    console.info(f"Android directory generated at: {android_dir}")
    return android_dir
