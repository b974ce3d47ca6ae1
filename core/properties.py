"""Read and update Java ``.properties`` files (key.properties, gradle wrapper)."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping
import re

import javaproperties


_BARE_LF = re.compile(r"(?<!\r)\n")


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties *text*; later duplicates win, as in ``java.util.Properties``."""

    return javaproperties.loads(text)


def read_properties(path: Path) -> Dict[str, str]:
    """Return the properties stored at ``path``; a missing file yields ``{}``."""

    if not path.exists():
        return {}
    with path.open(encoding="utf-8") as fp:
        return javaproperties.load(fp)


def format_property(key: str, value: str) -> str:
    return javaproperties.join_key_value(key, value, separator="=")


def update_properties(path: Path, updates: Mapping[str, str]) -> None:
    """Set ``updates`` in the file at ``path``, keeping every other line as-is.

    Existing keys are rewritten in place; new keys are appended. The file is
    created when missing, and a CRLF file stays CRLF.
    """

    text = path.read_bytes().decode("utf-8") if path.exists() else ""
    crlf = text.split("\n", 1)[0].endswith("\r") and "\n" in text
    if text and not text.endswith(("\n", "\r")):
        text += "\r\n" if crlf else "\n"

    properties = javaproperties.PropertiesFile.loads(text)
    for key, value in updates.items():
        properties[key] = value

    output = properties.dumps(separator="=")
    if crlf:
        output = _BARE_LF.sub("\r\n", output)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(output, encoding="utf-8", newline="")


__all__ = [
    "format_property",
    "parse_properties",
    "read_properties",
    "update_properties",
]
