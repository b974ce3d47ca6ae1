"""Placeholder rendering and environment variable expansion."""
from __future__ import annotations

from typing import Any, Mapping
import os
import re


_PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
_ENV_NAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")


class TemplateError(ValueError):
    """Raised when template resolution fails."""


def render_placeholders(text: str, variables: Mapping[str, Any], *, strict: bool = False) -> str:
    """Replace ``{{key}}`` occurrences in *text* with values from *variables*.

    Unknown placeholders are left untouched unless *strict* is set, in which
    case they raise :class:`TemplateError`.
    """

    def replacement(match: re.Match[str]) -> str:
        key = match.group(1).strip()
        if key in variables:
            return str(variables[key])
        if strict:
            raise TemplateError(f"Unknown template variable '{key}'")
        return match.group(0)

    if not _PLACEHOLDER_PATTERN.search(text):
        return text
    return _PLACEHOLDER_PATTERN.sub(replacement, text)


def extract_placeholders(value: Any) -> set[str]:
    """Collect all template placeholder names referenced within *value*."""

    placeholders: set[str] = set()

    def _collect(obj: Any) -> None:
        if isinstance(obj, str):
            for match in _PLACEHOLDER_PATTERN.finditer(obj):
                path = match.group(1).strip()
                if path:
                    placeholders.add(path)
            return
        if isinstance(obj, Mapping):
            for item in obj.values():
                _collect(item)
            return
        if isinstance(obj, (list, tuple)):
            for item in obj:
                _collect(item)

    _collect(value)
    return placeholders


def expand_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``$NAME`` and ``${NAME}`` references using *environ*.

    A ``$`` that is not followed by a name is kept literally. Missing variables
    and an unterminated ``${`` raise :class:`TemplateError`.
    """

    env = os.environ if environ is None else environ
    out: list[str] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if char != "$":
            out.append(char)
            index += 1
            continue

        if index + 1 < length and text[index + 1] == "{":
            end = text.find("}", index + 2)
            if end == -1:
                raise TemplateError(f"Unclosed env var in config value: {text}")
            name = text[index + 2:end]
            out.append(_lookup_env(env, name))
            index = end + 1
            continue

        match = _ENV_NAME_PATTERN.match(text, index + 1)
        if match is None:
            out.append(char)
            index += 1
            continue
        out.append(_lookup_env(env, match.group(0)))
        index = match.end()

    return "".join(out)


def _lookup_env(env: Mapping[str, str], name: str) -> str:
    try:
        return env[name]
    except KeyError:
        raise TemplateError(f"Missing env var: {name}") from None


__all__ = [
    "TemplateError",
    "expand_env_vars",
    "extract_placeholders",
    "render_placeholders",
]
