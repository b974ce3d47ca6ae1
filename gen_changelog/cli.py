"""Command line interface for gen_changelog."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from core.console import Console
from core.git_api import GitRepository

from .src.changelog import (
    BASE_URL_VARIABLE,
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    build_prompt,
    fallback_changelog,
    request_changelog,
    resolve_api_key,
    resolve_language,
)
from .src.history import ChangelogError, collect_log, detect_current_tag, find_previous_tag


def main(args: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="gen_changelog", description="Generate a release changelog with Claude")
    parser.add_argument("--tag", help="Current release tag (e.g. v0.8.2); detected from HEAD when omitted")
    parser.add_argument("-o", "--output", help="Output file; printed to stdout when omitted")
    parser.add_argument("--max-commits", type=int, default=50, help="Maximum number of commits to include")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Model name")
    parser.add_argument("--api-key", help="API key; defaults to $ANTHROPIC_API_KEY or $ANTHROPIC_AUTH_TOKEN")
    parser.add_argument("--base-url", help=f"API base URL; defaults to ${BASE_URL_VARIABLE} or {DEFAULT_BASE_URL}")
    parser.add_argument(
        "--prompt",
        help="Custom prompt; {{tag}}, {{prev_tag}}, {{git_log}} and {{lang}} are replaced",
    )
    parser.add_argument("--lang", default="English", help="Output language: English name, ISO 639-1 or 639-3 code")
    parser.add_argument("--repo", default=".", help="Path inside the git repository")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")

    parsed_args = parser.parse_args(sys.argv[1:] if args is None else args)
    console = Console.from_flags(quiet=parsed_args.quiet, stream=sys.stderr)

    try:
        api_key = resolve_api_key(parsed_args.api_key, os.environ)
        base_url = parsed_args.base_url or os.environ.get(BASE_URL_VARIABLE) or DEFAULT_BASE_URL
        lang = resolve_language(parsed_args.lang)

        repo = GitRepository.discover(parsed_args.repo)
        if repo is None:
            raise ChangelogError(f"Not a git repository: {parsed_args.repo}")

        tag = parsed_args.tag or detect_current_tag(repo)
        prev_tag = find_previous_tag(repo, tag)
        since = prev_tag or "initial"
        console.info(f"Generating changelog for {tag} (since {since})...")

        git_log = collect_log(repo, prev_tag, parsed_args.max_commits)
        prompt = build_prompt(parsed_args.prompt, tag=tag, prev_tag=since, git_log=git_log, lang=lang)
    except (OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        changelog = request_changelog(prompt, api_key=api_key, model=parsed_args.model, base_url=base_url)
    except ChangelogError as e:
        console.warning(f"AI changelog failed: {e}. Falling back to git log.")
        changelog = fallback_changelog(since, git_log)

    if parsed_args.output is None:
        print(changelog)
        return 0

    output = Path(parsed_args.output)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(changelog, encoding="utf-8")
    except OSError as e:
        print(f"Error: Failed to write {output}: {e}", file=sys.stderr)
        return 1
    console.info(f"Changelog written to: {output}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
