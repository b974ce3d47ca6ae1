"""Lightweight git tag for the version a pubspec is about to leave."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from core.console import Console
from core.git_api import GitRepository
from core.pubspec import read_pubspec_version

from .version import Version, VersionError


TAG_PREFIXES = {"v": "v", "none": ""}


def ensure_current_version_tag(pubspec: Path, tag_prefix: str, console: Console) -> Optional[str]:
    """Tag ``HEAD`` with the pubspec's current version unless a tag exists.

    Returns the created tag name, or ``None`` when nothing was created. Both
    ``X.Y.Z`` and ``vX.Y.Z`` count as existing tags.
    """

    start_dir = pubspec.parent if str(pubspec.parent) else Path(".")
    repo = GitRepository.discover(start_dir)
    if repo is None:
        console.info("Skipping tag check (not in a git repository)")
        return None

    raw = read_pubspec_version(pubspec.read_text(encoding="utf-8"))
    if raw is None:
        console.info("Skipping tag check (no version found in pubspec)")
        return None
    try:
        version = Version.parse(raw)
    except VersionError as e:
        console.info(f"Skipping tag check (invalid semver in pubspec '{raw}'): {e}")
        return None

    plain = version.tag_base
    prefixed = f"v{plain}"
    if repo.tag_exists(plain) or repo.tag_exists(prefixed):
        console.info(f"Tag already exists for current version: {raw} (checked '{plain}' and '{prefixed}')")
        return None

    head = repo.head_commit()
    if head is None:
        console.info("Skipping tag creation (repository has no commits yet)")
        return None

    tag = f"{TAG_PREFIXES[tag_prefix]}{plain}"
    repo.create_lightweight_tag(tag, head)
    console.info(f"Created lightweight tag '{tag}' for current version {raw}")
    return tag
