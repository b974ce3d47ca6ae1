"""Command line interface for bump_version."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from core.console import Console

from .src.tagging import TAG_PREFIXES, ensure_current_version_tag
from .src.version import PARTS, VersionError, bump_pubspec_content


def main(args: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bump_version",
        description="Bump the version in pubspec.yaml after tagging the current version",
    )
    parser.add_argument("part", choices=PARTS, help="The part of the version to increment")
    parser.add_argument("--pubspec", default="pubspec.yaml", help="Path to pubspec.yaml")
    parser.add_argument(
        "--tag-prefix",
        choices=sorted(TAG_PREFIXES),
        default="v",
        help="Prefix of the auto-created tag: 'v' for v1.2.3, 'none' for 1.2.3",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")

    parsed_args = parser.parse_args(sys.argv[1:] if args is None else args)
    console = Console.from_flags(quiet=parsed_args.quiet)
    pubspec = Path(parsed_args.pubspec)

    try:
        ensure_current_version_tag(pubspec, parsed_args.tag_prefix, console)
        content = pubspec.read_bytes().decode("utf-8")
        new_content, new_version = bump_pubspec_content(content, parsed_args.part)
    except VersionError as e:
        print(f"Error: Invalid semver format in {pubspec}: {e}", file=sys.stderr)
        return 1
    except (OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if new_version is None:
        console.info(f"No version line found in {pubspec}")
        return 0

    with pubspec.open("w", encoding="utf-8", newline="") as handle:
        handle.write(new_content)
    console.info(f"Bumped version to: {new_version}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
