"""Detect directories that only exist to hold worktrees of one repository.

Two checks live here and they are deliberately different:

* ``is_bare_repo_container`` is relaxed. The candidate is itself a bare
  repository, so a single worktree of it among its children is enough; other
  files and unrelated directories do not matter.
* ``find_worktree_container`` is strict. The candidate is an ordinary
  directory, and it is only hidden when every child is a worktree of one and
  the same main repository.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import GitCommandError, NotARepositoryError
from .git import Repository, RepositoryBackend
from .paths import canonicalize

logger = logging.getLogger(__name__)


def is_bare_repo_container(candidate: Path, repo: Repository, backend: RepositoryBackend) -> bool:
    """Return True when the bare repository at ``candidate`` holds its own worktrees."""

    try:
        bare_git_dir = canonicalize(repo.git_dir)
    except OSError as exc:
        logger.warning("Could not canonicalize git dir %s of %s: %s", repo.git_dir, candidate, exc)
        return False

    qualifying = 0
    try:
        with os.scandir(candidate) as it:
            children = list(it)
    except OSError as exc:
        logger.warning("Could not read %s while checking for a bare repo container: %s", candidate, exc)
        return False

    for child in children:
        if child.name == ".git":
            continue
        try:
            if child.is_file():
                continue
            resolved = canonicalize(Path(child.path))
        except OSError as exc:
            logger.warning("Could not canonicalize %s, skipping this entry: %s", child.path, exc)
            continue
        if resolved == bare_git_dir:
            logger.debug("Ignoring the bare repository's own git dir %s", child.path)
            continue
        if not resolved.is_dir():
            continue
        try:
            child_repo = backend.open(resolved)
        except NotARepositoryError:
            continue
        except GitCommandError as exc:
            logger.warning("Failed to inspect %s: %s", resolved, exc)
            continue
        if not child_repo.is_worktree():
            logger.debug("%s is a repository but not a worktree", resolved)
            continue
        try:
            main = backend.main_repository_path(resolved)
        except (NotARepositoryError, GitCommandError, OSError) as exc:
            logger.warning("Failed to get main repository path for %s: %s", resolved, exc)
            continue
        if main == bare_git_dir:
            qualifying += 1
        else:
            logger.debug("Worktree %s belongs to %s, not %s", resolved, main, bare_git_dir)

    logger.debug("%s has %d qualifying worktree children", candidate, qualifying)
    return qualifying > 0


@dataclass(frozen=True)
class WorktreeContainer:
    """A plain directory whose children are all worktrees of ``main``."""

    main: Path
    worktrees: tuple[tuple[str, Path], ...]


def find_worktree_container(candidate: Path, backend: RepositoryBackend) -> WorktreeContainer | None:
    """Return the container found at ``candidate``, or None.

    Every child must be a worktree (directly or through a symlink) of the
    same main repository; each worktree is reported by child name and
    canonical path.
    """

    try:
        with os.scandir(candidate) as it:
            children = sorted(it, key=lambda child: child.name)
    except OSError as exc:
        logger.warning("Could not read %s while checking for a worktree container: %s", candidate, exc)
        return None

    first_main: Path | None = None
    worktrees: list[tuple[str, Path]] = []
    for child in children:
        child_path = Path(child.path)
        try:
            if child.is_file(follow_symlinks=False):
                logger.debug("%s is a file, %s is not a worktree container", child_path, candidate)
                return None
            if not (child.is_dir(follow_symlinks=False) or child.is_symlink()):
                logger.debug("%s has an unexpected type", child_path)
                return None
            resolved = canonicalize(child_path)
        except OSError as exc:
            logger.warning("Could not inspect %s, %s is not a worktree container: %s", child_path, candidate, exc)
            return None
        if not resolved.is_dir():
            logger.debug("%s resolves to a non-directory", child_path)
            return None
        try:
            repo = backend.open(resolved)
        except NotARepositoryError:
            logger.debug("%s is not a repository", resolved)
            return None
        except GitCommandError as exc:
            logger.warning("Failed to inspect %s: %s", resolved, exc)
            return None
        if not repo.is_worktree():
            logger.debug("%s is a repository but not a worktree", resolved)
            return None
        try:
            main = backend.main_repository_path(resolved)
        except (NotARepositoryError, GitCommandError, OSError) as exc:
            logger.warning("Failed to get main repository path for %s: %s", resolved, exc)
            return None
        if first_main is None:
            first_main = main
        elif main != first_main:
            logger.debug("%s belongs to %s, expected %s", resolved, main, first_main)
            return None
        worktrees.append((child.name, resolved))

    if first_main is None:
        return None
    logger.debug("%s is a worktree container for %s (%d worktrees)", candidate, first_main, len(worktrees))
    return WorktreeContainer(main=first_main, worktrees=tuple(worktrees))


__all__ = ["is_bare_repo_container", "WorktreeContainer", "find_worktree_container"]
