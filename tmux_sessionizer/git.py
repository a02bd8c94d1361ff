"""Thin wrappers around the git CLI used to classify directories."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from .exceptions import GitCommandError, NotARepositoryError
from .models import WorktreeRecord
from .paths import canonicalize

logger = logging.getLogger(__name__)

# Variables that would point git at a different repository than the one we ask about.
_REPO_ENV_VARS = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_COMMON_DIR",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_PREFIX",
    "GIT_CEILING_DIRECTORIES",
)


def run_git(
    args: Iterable[str],
    *,
    cwd: Path,
    env: dict[str, str] | None = None,
    raise_on_error: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure."""

    cmd = ["git", *args]
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise GitCommandError(cmd, 127, str(exc)) from exc
    if raise_on_error and proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, proc.stderr)
    return proc


def exact_repo_env(path: Path) -> dict[str, str]:
    """Environment that stops git from discovering a repository above ``path``."""

    env = {key: value for key, value in os.environ.items() if key not in _REPO_ENV_VARS}
    env["GIT_CEILING_DIRECTORIES"] = str(Path(path).absolute().parent)
    return env


@dataclass(frozen=True)
class Repository:
    """A repository opened at exactly ``path``."""

    path: Path
    git_dir: Path
    common_dir: Path
    bare: bool
    workdir: Path | None = None

    @classmethod
    def open(cls, path: Path) -> "Repository":
        path = Path(path)
        if not path.is_dir():
            raise NotARepositoryError(path)
        env = exact_repo_env(path)
        proc = run_git(
            [
                "rev-parse",
                "--path-format=absolute",
                "--git-dir",
                "--git-common-dir",
                "--is-bare-repository",
            ],
            cwd=path,
            env=env,
            raise_on_error=False,
        )
        if proc.returncode != 0:
            logger.debug("%s is not a git repository: %s", path, proc.stderr.strip())
            raise NotARepositoryError(path)
        lines = [line.strip() for line in proc.stdout.splitlines() if line.strip()]
        if len(lines) != 3:
            raise GitCommandError(proc.args, proc.returncode, f"unexpected rev-parse output: {proc.stdout!r}")
        git_dir, common_dir, bare_flag = lines
        bare = bare_flag == "true"
        workdir = None
        if not bare:
            top = run_git(["rev-parse", "--show-toplevel"], cwd=path, env=env, raise_on_error=False)
            if top.returncode == 0 and top.stdout.strip():
                workdir = Path(top.stdout.strip())
        repo = cls(
            path=path,
            git_dir=Path(git_dir),
            common_dir=Path(common_dir),
            bare=bare,
            workdir=workdir,
        )
        logger.debug("Opened repository %s (bare=%s, worktree=%s)", path, repo.bare, repo.is_worktree())
        return repo

    def is_bare(self) -> bool:
        return self.bare

    def is_worktree(self) -> bool:
        return not _same_path(self.git_dir, self.common_dir)

    def list_linked_worktrees(self) -> list[WorktreeRecord]:
        """Worktrees registered under ``<common dir>/worktrees``.

        The main working tree is never part of the result. Entries whose
        administrative name is not valid UTF-8, or whose ``gitdir`` pointer
        cannot be read, are skipped with a warning.
        """

        admin_root = self.common_dir / "worktrees"
        if not admin_root.is_dir():
            return []
        records: list[WorktreeRecord] = []
        with os.scandir(admin_root) as it:
            for admin in it:
                if not admin.is_dir():
                    continue
                name = admin.name
                try:
                    name.encode("utf-8")
                except UnicodeEncodeError:
                    logger.warning("Found a worktree with a non-UTF-8 name under %s, skipping", admin_root)
                    continue
                try:
                    pointer = Path(admin.path, "gitdir").read_text(encoding="utf-8").strip()
                except (OSError, UnicodeDecodeError) as exc:
                    logger.warning("Failed to read details for worktree %s, skipping: %s", name, exc)
                    continue
                if not pointer:
                    logger.warning("Worktree %s has an empty gitdir pointer, skipping", name)
                    continue
                dotgit = Path(pointer)
                if not dotgit.is_absolute():
                    dotgit = Path(admin.path) / dotgit
                records.append(WorktreeRecord(name=name, path=dotgit.parent))
        logger.debug("Found %d linked worktrees for %s", len(records), self.path)
        return records


def _same_path(left: Path, right: Path) -> bool:
    try:
        return canonicalize(left) == canonicalize(right)
    except OSError:
        return os.path.normpath(left) == os.path.normpath(right)


class RepositoryBackend(Protocol):
    """Capabilities the directory scanner needs from a repository library."""

    def open(self, path: Path) -> Repository:
        """Open the repository rooted at ``path``.

        Raises:
            NotARepositoryError: If ``path`` does not hold a repository.
            GitCommandError: If the backend fails while inspecting it.
        """
        ...

    def main_repository_path(self, path: Path) -> Path:
        """Canonical location owning the metadata of the repository at ``path``."""
        ...


class GitBackend:
    """Repository backend that shells out to the ``git`` CLI."""

    def open(self, path: Path) -> Repository:
        return Repository.open(path)

    def main_repository_path(self, path: Path) -> Path:
        """Return the canonical main-repository path for ``path``.

        Bare repositories own themselves. A linked worktree belongs to its
        common directory when that is bare, and otherwise to the working tree
        holding the common ``.git`` directory. A standard repository is its
        own working tree.

        Raises:
            NotARepositoryError, GitCommandError: If the backend fails.
            OSError: If the computed path cannot be canonicalised.
        """

        repo = self.open(path)
        if repo.is_bare():
            main = repo.path
        elif repo.is_worktree():
            common = self.open(repo.common_dir)
            main = repo.common_dir if common.is_bare() else repo.common_dir.parent
        else:
            main = repo.workdir or repo.common_dir.parent
        resolved = canonicalize(main)
        logger.debug("Main repository for %s is %s", path, resolved)
        return resolved


__all__ = [
    "run_git",
    "exact_repo_env",
    "Repository",
    "RepositoryBackend",
    "GitBackend",
]
