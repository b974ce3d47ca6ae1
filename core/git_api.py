"""Thin pygit2 wrapper for the repository queries the release tools need."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pygit2


class GitRepository:
    """
    Repository handle opened by discovery from any path inside a work tree.

    Only read queries and lightweight tag creation are exposed. Tags are
    written straight to ``refs/tags`` and never run hooks.
    """

    def __init__(self, repo: pygit2.Repository) -> None:
        self._repo = repo

    @classmethod
    def discover(cls, start: Path | str) -> Optional["GitRepository"]:
        """Open the repository containing ``start``, or return ``None``."""
        try:
            git_dir = pygit2.discover_repository(str(start))
        except (pygit2.GitError, KeyError):
            return None
        if git_dir is None:
            return None
        return cls(pygit2.Repository(git_dir))

    @property
    def repo(self) -> pygit2.Repository:
        return self._repo

    @property
    def root_dir(self) -> Path:
        workdir = self._repo.workdir
        return Path(workdir) if workdir else Path(self._repo.path)

    def head_commit(self) -> Optional[str]:
        """Returns the HEAD commit id, or ``None`` for a repository without commits."""
        if self._repo.head_is_unborn:
            return None
        return str(self._repo.head.target)

    def tag_exists(self, tag: str) -> bool:
        return f"refs/tags/{tag}" in self._repo.references

    def tag_names(self) -> List[str]:
        prefix = "refs/tags/"
        return sorted(name[len(prefix):] for name in self._repo.references if name.startswith(prefix))

    def tag_commit(self, tag: str) -> str:
        """Return the commit a tag points at, peeling annotated tags."""
        try:
            reference = self._repo.references[f"refs/tags/{tag}"]
        except KeyError:
            raise RuntimeError(f"Tag '{tag}' not found") from None
        try:
            return str(reference.peel(pygit2.Commit).id)
        except (pygit2.GitError, ValueError) as e:
            raise RuntimeError(f"Tag '{tag}' does not point at a commit: {e}") from e

    def tags_at(self, commit: str) -> List[str]:
        """Tags (lightweight or annotated) whose commit is ``commit``."""
        found = []
        for tag in self.tag_names():
            try:
                if self.tag_commit(tag) == commit:
                    found.append(tag)
            except RuntimeError:
                continue
        return found

    def first_parent_history(self, start: Optional[str] = None) -> Iterator[Tuple[str, str]]:
        """Yield ``(commit id, summary line)`` following first parents from ``start`` or HEAD."""
        if start is None:
            start = self.head_commit()
            if start is None:
                return
        commit = self._repo[start].peel(pygit2.Commit)
        while True:
            message = commit.message or ""
            yield str(commit.id), message.splitlines()[0] if message else ""
            if not commit.parents:
                break
            commit = commit.parents[0]

    def create_lightweight_tag(self, tag: str, target: str) -> None:
        """Create ``refs/tags/<tag>`` pointing at ``target``; fails if it exists."""
        if self.tag_exists(tag):
            raise RuntimeError(f"Tag '{tag}' already exists")
        try:
            self._repo.references.create(f"refs/tags/{tag}", pygit2.Oid(hex=target))
        except (pygit2.GitError, ValueError) as e:
            raise RuntimeError(f"Failed to create lightweight tag '{tag}': {e}") from e


__all__ = ["GitRepository"]
