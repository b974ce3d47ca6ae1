"""Shared core utilities for the Flutter developer tools."""

from .command_runner import (
    ChildFailure,
    CommandError,
    CommandResult,
    CommandRunner,
    ConfigurationError,
    RecordingCommandRunner,
    SpawnError,
    SubprocessCommandRunner,
)
from .config_loader import FILE_LOADERS, load_config_file, lookup_path
from .console import Console
from .template import TemplateError, expand_env_vars, extract_placeholders, render_placeholders

__all__ = [
    "ChildFailure",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "ConfigurationError",
    "RecordingCommandRunner",
    "SpawnError",
    "SubprocessCommandRunner",
    "FILE_LOADERS",
    "load_config_file",
    "lookup_path",
    "Console",
    "TemplateError",
    "expand_env_vars",
    "extract_placeholders",
    "render_placeholders",
]
