from __future__ import annotations

from pathlib import Path
import shutil
import tempfile
import unittest

import pygit2

from core.git_api import GitRepository


class GitRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.test_dir = tempfile.mkdtemp()
        self.path = Path(self.test_dir)
        self.signature = pygit2.Signature("Test User", "test@example.com")

    def tearDown(self) -> None:
        shutil.rmtree(self.test_dir)

    def _commit(self, repo: pygit2.Repository, message: str = "init") -> str:
        tree = repo.TreeBuilder().write()
        parents = [] if repo.head_is_unborn else [repo.head.target]
        return str(repo.create_commit("HEAD", self.signature, self.signature, message, tree, parents))

    def test_discover_outside_repository(self) -> None:
        self.assertIsNone(GitRepository.discover(self.path))

    def test_discover_from_subdirectory(self) -> None:
        pygit2.init_repository(str(self.path))
        nested = self.path / "app" / "lib"
        nested.mkdir(parents=True)
        repo = GitRepository.discover(nested)
        self.assertIsNotNone(repo)
        self.assertEqual(repo.root_dir.resolve(), self.path.resolve())

    def test_unborn_head(self) -> None:
        pygit2.init_repository(str(self.path))
        self.assertIsNone(GitRepository.discover(self.path).head_commit())

    def test_lightweight_tag(self) -> None:
        raw = pygit2.init_repository(str(self.path))
        head = self._commit(raw)
        repo = GitRepository.discover(self.path)

        self.assertEqual(repo.head_commit(), head)
        self.assertFalse(repo.tag_exists("v1.0.0"))
        repo.create_lightweight_tag("v1.0.0", head)
        self.assertTrue(repo.tag_exists("v1.0.0"))
        self.assertEqual(str(raw.references["refs/tags/v1.0.0"].target), head)

        with self.assertRaises(RuntimeError):
            repo.create_lightweight_tag("v1.0.0", head)

    def test_annotated_tags_are_peeled(self) -> None:
        raw = pygit2.init_repository(str(self.path))
        first = self._commit(raw, "first")
        second = self._commit(raw, "second")
        raw.create_tag("v1.0.0", pygit2.Oid(hex=first), pygit2.enums.ObjectType.COMMIT, self.signature, "release")
        raw.references.create("refs/tags/v1.1.0", pygit2.Oid(hex=second))
        repo = GitRepository.discover(self.path)

        self.assertEqual(repo.tag_names(), ["v1.0.0", "v1.1.0"])
        self.assertEqual(repo.tag_commit("v1.0.0"), first)
        self.assertEqual(repo.tags_at(second), ["v1.1.0"])
        with self.assertRaises(RuntimeError):
            repo.tag_commit("v9.9.9")

    def test_first_parent_history(self) -> None:
        raw = pygit2.init_repository(str(self.path))
        first = self._commit(raw, "first\n\nbody")
        second = self._commit(raw, "second")
        repo = GitRepository.discover(self.path)
        self.assertEqual(list(repo.first_parent_history()), [(second, "second"), (first, "first")])

    def test_history_of_unborn_head_is_empty(self) -> None:
        pygit2.init_repository(str(self.path))
        self.assertEqual(list(GitRepository.discover(self.path).first_parent_history()), [])


if __name__ == "__main__":
    unittest.main()
