"""Pubspec ``version:`` rewriting."""
from __future__ import annotations

from typing import Optional, Tuple

from core.pubspec import VERSION_LINE_PATTERN
from core.semver import PARTS, Version, VersionError


def bump_pubspec_content(content: str, part: str) -> Tuple[str, Optional[Version]]:
    """Rewrite the first ``version:`` line of *content*.

    Returns the new content and the new version, or ``(content, None)`` when
    the file has no version line.
    """

    match = VERSION_LINE_PATTERN.search(content)
    if match is None:
        return content, None
    value = match.group(1)
    comment_at = value.find(" #")
    comment = value[comment_at:] if comment_at != -1 else ""
    new_version = Version.parse(value[:len(value) - len(comment)]).bump(part)
    start, end = match.span()
    return f"{content[:start]}version: {new_version}{comment}{content[end:]}", new_version


__all__ = ["PARTS", "Version", "VersionError", "bump_pubspec_content"]
