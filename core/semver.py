"""Semantic version parsing, bumping and precedence."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple
import re


PARTS = ("major", "minor", "patch", "build")

_NUMBER = r"0|[1-9]\d*"
_IDENT = r"[0-9A-Za-z-]+"
SEMVER_PATTERN = re.compile(
    rf"^(?P<major>{_NUMBER})\.(?P<minor>{_NUMBER})\.(?P<patch>{_NUMBER})"
    rf"(?:-(?P<pre>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)


class VersionError(ValueError):
    """Raised for version strings that are not valid semantic versions."""


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int
    pre: str = ""
    build: str = ""

    @classmethod
    def parse(cls, text: str) -> "Version":
        match = SEMVER_PATTERN.match(text.strip())
        if match is None:
            raise VersionError(f"'{text}' is not a valid semantic version")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre=match.group("pre") or "",
            build=match.group("build") or "",
        )

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Version"]:
        """Parse ``v1.2.3`` or ``1.2.3``; other tag names yield ``None``."""
        try:
            return cls.parse(tag[1:] if tag.startswith("v") else tag)
        except VersionError:
            return None

    def __str__(self) -> str:
        text = self.tag_base
        if self.build:
            text += f"+{self.build}"
        return text

    @property
    def tag_base(self) -> str:
        """``X.Y.Z`` plus prerelease; build metadata never takes part in tags."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += f"-{self.pre}"
        return text

    @property
    def build_number(self) -> int:
        return int(self.build) if self.build.isdigit() else 0

    @property
    def precedence(self) -> Tuple:
        """Sort key following semver precedence; build metadata is ignored.

        A release sorts above its prereleases, numeric identifiers compare
        numerically and below alphanumeric ones.
        """
        if not self.pre:
            pre_key: Tuple = (1,)
        else:
            pre_key = (0, tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.pre.split(".")
            ))
        return (self.major, self.minor, self.patch, pre_key)

    def bump(self, part: str) -> "Version":
        if part == "major":
            return Version(self.major + 1, 0, 0, build="1")
        if part == "minor":
            return Version(self.major, self.minor + 1, 0, build="1")
        if part == "patch":
            return Version(self.major, self.minor, self.patch + 1, build="1")
        if part == "build":
            return replace(self, build=str(self.build_number + 1))
        raise ValueError(f"Unknown version part '{part}'. Choose from: {', '.join(PARTS)}")


__all__ = ["PARTS", "SEMVER_PATTERN", "Version", "VersionError"]
