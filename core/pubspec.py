"""Helpers for reading and editing top-level fields of ``pubspec.yaml``.

Edits are line based so comments and formatting elsewhere in the file survive.
"""
from __future__ import annotations

from typing import Any, Mapping
import json
import re

import yaml


VERSION_LINE_PATTERN = re.compile(r"(?m)^version:[ \t]*([^\r\n]+)")


def _field_pattern(key: str) -> re.Pattern[str]:
    return re.compile(rf"(?m)^{re.escape(key)}:[ \t]*([^\r\n]*)")


def read_pubspec_version(content: str) -> str | None:
    """Return the ``version:`` value of a pubspec, or ``None`` when absent.

    YAML parsing is preferred; the regex fallback copes with files that are
    not valid YAML as a whole.
    """

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError:
        document = None
    if isinstance(document, Mapping):
        value = document.get("version")
        if value is not None:
            text = str(value).strip()
            if text:
                return text

    match = VERSION_LINE_PATTERN.search(content)
    if match is None:
        return None
    text = match.group(1).strip()
    return text or None


def format_scalar(value: Any) -> str:
    """Render ``value`` as a YAML scalar, quoting only when needed."""

    text = str(value)
    try:
        round_trip = yaml.safe_load(f"key: {text}")
    except yaml.YAMLError:
        round_trip = None
    if isinstance(round_trip, Mapping) and round_trip.get("key") == text and "#" not in text:
        return text
    return json.dumps(text, ensure_ascii=False)


def set_top_level_field(content: str, key: str, value: Any) -> str:
    """Replace the top-level ``key:`` line or append it when missing."""

    line = f"{key}: {format_scalar(value)}"
    pattern = _field_pattern(key)
    if pattern.search(content):
        return pattern.sub(lambda _match: line, content, count=1)
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{content}{line}\n"


__all__ = [
    "VERSION_LINE_PATTERN",
    "format_scalar",
    "read_pubspec_version",
    "set_top_level_field",
]
