"""Shared helpers for loading configuration mappings from disk."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping

import json
import tomllib

import yaml


ConfigLoader = Callable[[Any], Any]


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""


def supported_suffixes() -> str:
    return ", ".join(sorted(FILE_LOADERS)) or "<none>"


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``."""

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        raise ValueError(
            f"Unsupported configuration file extension: {suffix}. Supported: {supported_suffixes()}"
        )

    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    with path.open(mode, **kwargs) as handle:
        data = loader(handle)

    return ensure_mapping(data, source=str(path))


def ensure_mapping(data: Any, *, source: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"Configuration '{source}' must contain a mapping at the root")
    return data


def lookup_path(data: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Return the value at dotted ``path`` inside nested mappings, or ``default``."""

    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


__all__ = [
    "ConfigLoader",
    "FILE_LOADERS",
    "ensure_mapping",
    "load_config_file",
    "lookup_path",
    "supported_suffixes",
]
