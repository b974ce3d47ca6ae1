"""
Console output shared by the command line tools.
"""
import sys
from typing import Optional, TextIO


class Console:
    """Simple console output handler with configurable log level.

    Levels: none < error < info < debug

    ``stream`` redirects info/debug/dry output (errors always go to stderr);
    ``cmd_run`` points it at stderr so stdout carries only the child's output.
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "info", dry_run: bool = False, stream: Optional[TextIO] = None):
        if level not in self.LEVELS:
            raise ValueError(f"Unknown console level '{level}'. Choose from: {', '.join(self.LEVELS)}")
        self.level_name = level
        self.level = self.LEVELS[level]
        self.dry_run = dry_run
        self.stream = stream

    @classmethod
    def from_flags(cls, *, verbose: bool = False, quiet: bool = False, dry_run: bool = False,
                   default: str = "info", stream: Optional[TextIO] = None) -> "Console":
        if quiet:
            level = "none"
        elif verbose:
            level = "debug"
        else:
            level = default
        return cls(level=level, dry_run=dry_run, stream=stream)

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[INFO] {message}", file=self.stream)

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(f"[ERROR] {message}", file=sys.stderr)

    def warning(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(f"[WARN] {message}", file=sys.stderr)

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(f"[DRY] {message}", file=self.stream)

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"[DEBUG] {message}", file=self.stream)
