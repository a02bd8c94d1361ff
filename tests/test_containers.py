"""Tests for the two container detectors."""

from __future__ import annotations

import unittest

from gitfixtures import TempDirTestCase, add_worktree, init_bare, init_bare_container, init_repo, requires_git

from tmux_sessionizer.containers import find_worktree_container, is_bare_repo_container
from tmux_sessionizer.git import GitBackend, Repository


@requires_git
class BareRepoContainerTests(TempDirTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.backend = GitBackend()
        self.seed = self.seed_repo()

    def test_container_with_worktrees_qualifies(self) -> None:
        container = init_bare_container(self.tmp / "container", self.seed)
        add_worktree(container, container / "feature_a")
        (container / "notes.txt").write_text("scratch", encoding="utf-8")
        self.mkdir("container", "unrelated")
        repo = Repository.open(container)
        self.assertTrue(is_bare_repo_container(container, repo, self.backend))

    def test_bare_repository_without_inner_worktrees(self) -> None:
        bare = init_bare(self.tmp / "central.git", self.seed)
        add_worktree(bare, self.tmp / "outside")
        repo = Repository.open(bare)
        self.assertFalse(is_bare_repo_container(bare, repo, self.backend))

    def test_worktree_of_another_repository_does_not_count(self) -> None:
        container = init_bare_container(self.tmp / "container", self.seed)
        other = init_repo(self.tmp / "other")
        add_worktree(other, container / "foreign")
        repo = Repository.open(container)
        self.assertFalse(is_bare_repo_container(container, repo, self.backend))


@requires_git
class WorktreeContainerTests(TempDirTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.backend = GitBackend()
        self.main = init_repo(self.tmp / "main")

    def test_all_children_worktrees_of_one_repository(self) -> None:
        holder = self.mkdir("holder")
        add_worktree(self.main, holder / "wt1")
        add_worktree(self.main, holder / "wt2")
        self.assertIsNotNone(find_worktree_container(holder, self.backend))

    def test_reports_main_repository_and_worktrees(self) -> None:
        holder = self.mkdir("holder")
        first = add_worktree(self.main, holder / "wt1")
        second = add_worktree(self.main, holder / "wt2")

        container = find_worktree_container(holder, self.backend)

        self.assertIsNotNone(container)
        self.assertEqual(container.main, self.main)
        self.assertEqual(container.worktrees, (("wt1", first), ("wt2", second)))

    def test_empty_directory_is_not_a_container(self) -> None:
        self.assertIsNone(find_worktree_container(self.mkdir("empty"), self.backend))

    def test_any_file_vetoes(self) -> None:
        holder = self.mkdir("holder")
        add_worktree(self.main, holder / "wt1")
        (holder / "README").write_text("hi", encoding="utf-8")
        self.assertIsNone(find_worktree_container(holder, self.backend))

    def test_plain_directory_vetoes(self) -> None:
        holder = self.mkdir("holder")
        add_worktree(self.main, holder / "wt1")
        self.mkdir("holder", "plain")
        self.assertIsNone(find_worktree_container(holder, self.backend))

    def test_main_repository_child_vetoes(self) -> None:
        holder = self.mkdir("holder")
        add_worktree(self.main, holder / "wt1")
        init_repo(holder / "standalone")
        self.assertIsNone(find_worktree_container(holder, self.backend))

    def test_worktrees_of_different_repositories_veto(self) -> None:
        other = init_repo(self.tmp / "other")
        holder = self.mkdir("holder")
        add_worktree(self.main, holder / "wt1")
        add_worktree(other, holder / "wt2")
        self.assertIsNone(find_worktree_container(holder, self.backend))

    def test_symlinked_worktree_counts(self) -> None:
        wt = add_worktree(self.main, self.tmp / "real_wt")
        holder = self.mkdir("holder")
        (holder / "link").symlink_to(wt, target_is_directory=True)
        self.assertIsNotNone(find_worktree_container(holder, self.backend))

    def test_unreadable_directory_is_not_a_container(self) -> None:
        self.assertIsNone(find_worktree_container(self.tmp / "missing", self.backend))


if __name__ == "__main__":
    unittest.main()
