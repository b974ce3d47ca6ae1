"""Release tags and the commit summaries between them."""
from __future__ import annotations

from typing import List, Optional

from core.git_api import GitRepository
from core.semver import Version


class ChangelogError(RuntimeError):
    """Raised when a changelog cannot be produced."""


def version_tags(repo: GitRepository) -> List[str]:
    """Tags that parse as ``[v]X.Y.Z``, highest precedence first."""
    tagged = [(Version.from_tag(tag), tag) for tag in repo.tag_names()]
    tagged = [(version, tag) for version, tag in tagged if version is not None]
    tagged.sort(key=lambda item: item[0].precedence, reverse=True)
    return [tag for _, tag in tagged]


def detect_current_tag(repo: GitRepository) -> str:
    head = repo.head_commit()
    tags = repo.tags_at(head) if head else []
    if not tags:
        raise ChangelogError("No tag found on HEAD. Use --tag to specify one.")
    ranked = [tag for tag in version_tags(repo) if tag in tags]
    return ranked[0] if ranked else tags[0]


def find_previous_tag(repo: GitRepository, current: str) -> Optional[str]:
    """Return the release before ``current``.

    For a version tag that is the highest version tag below it; otherwise the
    highest version tag with another name.
    """
    current_version = Version.from_tag(current)
    for tag in version_tags(repo):
        if tag == current:
            continue
        if current_version is not None:
            version = Version.from_tag(tag)
            if version.precedence >= current_version.precedence:
                continue
        return tag
    return None


def collect_log(repo: GitRepository, previous: Optional[str], max_commits: int) -> List[str]:
    """``<short id> <summary>`` lines from HEAD back to ``previous`` (exclusive).

    Only first parents are followed and merge commits are skipped.
    """
    stop = repo.tag_commit(previous) if previous else None
    lines: List[str] = []
    for commit_id, summary in repo.first_parent_history():
        if commit_id == stop or len(lines) >= max_commits:
            break
        if summary.startswith("Merge "):
            continue
        lines.append(f"{commit_id[:7]} {summary}")

    if not lines:
        raise ChangelogError("No commits found for changelog.")
    return lines
