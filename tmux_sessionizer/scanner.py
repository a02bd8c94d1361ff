"""Turn the configured roots into a flat list of session targets."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .containers import find_worktree_container, is_bare_repo_container
from .exceptions import GitCommandError, HomeNotFoundError, NotARepositoryError
from .git import GitBackend, RepositoryBackend
from .models import DirectoryEntry, EntryKind, ScanConfig
from .paths import canonicalize, expand_tilde

logger = logging.getLogger(__name__)

_GITDIR_PREFIX = "gitdir:"


@dataclass
class _ScanState:
    entries: list[DirectoryEntry] = field(default_factory=list)
    seen: set[Path] = field(default_factory=set)
    # Children of the current root not processed yet, canonical path -> original.
    pending: dict[Path, Path] = field(default_factory=dict)

    def emit(self, entry: DirectoryEntry) -> None:
        logger.debug("Adding %s entry %s", entry.kind.value, entry)
        self.entries.append(entry)
        self.seen.add(entry.resolved_path)


class DirectoryScanner:
    """Scan search roots one level deep and classify what is found.

    Each child of a search root, and each additional path, becomes a
    candidate. Candidates are canonicalised and deduplicated, filtered by the
    exclusion patterns and the hidden-name rule, then classified as a plain
    directory, a main repository (followed by its linked worktrees) or a
    worktree. Directories that only hold worktrees are suppressed in favour of
    the worktrees themselves.

    A worktree met before its main repository, when that repository is a
    later child of the same root, makes the scanner process the repository
    first so it precedes its worktrees.
    """

    def __init__(self, config: ScanConfig, backend: RepositoryBackend | None = None):
        self.config = config
        self.backend = backend or GitBackend()

    def scan(self) -> list[DirectoryEntry]:
        state = _ScanState()
        for root in self.config.search_paths:
            state.pending = _pending_children(self._iter_root(root))
            while state.pending:
                key = next(iter(state.pending))
                child = state.pending.pop(key)
                self._process_candidate(child, state, from_root=True)
        state.pending = {}
        for extra in self.config.additional_paths:
            try:
                candidate = expand_tilde(extra)
            except HomeNotFoundError:
                logger.warning("Could not expand ~ in additional path %s, skipping", extra)
                continue
            self._process_candidate(candidate, state, from_root=False)
        logger.info("Directory scan complete, found %d entries", len(state.entries))
        return list(state.entries)

    def _iter_root(self, root: Path) -> list[Path]:
        try:
            base = expand_tilde(root)
        except HomeNotFoundError:
            logger.warning("Could not expand ~ in search path %s, skipping", root)
            return []
        if not base.is_dir():
            logger.warning("Search path %s is not a directory or is inaccessible, skipping", base)
            return []
        children: list[Path] = []
        try:
            with os.scandir(base) as it:
                for entry in it:
                    try:
                        if entry.is_dir():
                            children.append(Path(entry.path))
                    except OSError as exc:
                        logger.warning("Error reading %s: %s", entry.path, exc)
        except OSError as exc:
            logger.warning("Could not list search path %s: %s", base, exc)
            return []
        return sorted(children, key=lambda path: path.name)

    def _process_candidate(self, original: Path, state: _ScanState, *, from_root: bool) -> None:
        if not original.is_dir():
            logger.debug("Skipping non-directory %s", original)
            return
        try:
            resolved = canonicalize(original)
        except OSError as exc:
            logger.warning("Could not canonicalize %s, skipping: %s", original, exc)
            return
        if resolved in state.seen:
            logger.debug("Skipping duplicate %s", resolved)
            return
        pattern = self.config.is_excluded(original, resolved)
        if pattern is not None:
            logger.debug("Skipping %s excluded by %s", original, pattern.pattern)
            return
        name = resolved.name or original.name
        if from_root and name.startswith(".") and name != ".git":
            logger.debug("Skipping hidden directory %s", resolved)
            return

        try:
            repo = self.backend.open(resolved)
        except NotARepositoryError:
            repo = None
        except GitCommandError as exc:
            logger.warning("Failed to open %s as a git repository, treating as plain: %s", resolved, exc)
            repo = None

        if repo is None:
            container = find_worktree_container(resolved, self.backend)
            if container is None:
                state.emit(_plain(original, resolved))
                return
            parent = _display_parent(container.main)
            logger.debug("Skipping worktree container %s, listing its worktrees", resolved)
            self._process_pending_main(parent, state)
            for child_name, worktree in container.worktrees:
                self._emit_worktree(worktree, parent, child_name, state)
            return

        if repo.is_worktree():
            try:
                main = self.backend.main_repository_path(resolved)
            except (NotARepositoryError, GitCommandError, OSError) as exc:
                logger.warning("Could not find the main repository of worktree %s: %s", resolved, exc)
                state.emit(_plain(original, resolved))
                return
            parent = _display_parent(main)
            self._process_pending_main(parent, state)
            if resolved in state.seen:
                logger.debug("Worktree %s was listed by its main repository", resolved)
                return
            state.emit(
                DirectoryEntry(
                    original_path=original,
                    resolved_path=resolved,
                    display_name=_worktree_display_name(parent, resolved.name),
                    kind=EntryKind.WORKTREE,
                    parent_path=parent,
                )
            )
            return

        if repo.is_bare() and is_bare_repo_container(resolved, repo, self.backend):
            logger.debug("Skipping bare repository container %s, listing its worktrees", resolved)
        else:
            state.emit(
                DirectoryEntry(
                    original_path=original,
                    resolved_path=resolved,
                    display_name=name,
                    kind=EntryKind.MAIN_REPOSITORY,
                )
            )

        try:
            worktrees = repo.list_linked_worktrees()
        except OSError as exc:
            logger.warning("Could not list worktrees of %s: %s", resolved, exc)
            return
        parent = _display_parent(resolved)
        for record in worktrees:
            try:
                resolved_wt = canonicalize(record.path)
            except OSError as exc:
                logger.warning("Could not canonicalize worktree %s (%s), skipping: %s", record.name, record.path, exc)
                continue
            self._emit_worktree(resolved_wt, parent, record.name, state)

    def _process_pending_main(self, main: Path, state: _ScanState) -> None:
        original = state.pending.pop(main, None)
        if original is not None:
            logger.debug("Processing main repository %s ahead of its worktrees", main)
            self._process_candidate(original, state, from_root=True)

    def _emit_worktree(self, resolved_wt: Path, main: Path, name: str, state: _ScanState) -> None:
        if resolved_wt in state.seen:
            return
        pattern = self.config.is_excluded(resolved_wt)
        if pattern is not None:
            logger.debug("Skipping worktree %s excluded by %s", resolved_wt, pattern.pattern)
            return
        state.emit(
            DirectoryEntry(
                original_path=resolved_wt,
                resolved_path=resolved_wt,
                display_name=_worktree_display_name(main, name),
                kind=EntryKind.WORKTREE,
                parent_path=main,
            )
        )


def _pending_children(children: list[Path]) -> dict[Path, Path]:
    pending: dict[Path, Path] = {}
    for child in children:
        try:
            key = canonicalize(child)
        except OSError:
            key = child
        pending.setdefault(key, child)
    return pending


def _display_parent(main: Path) -> Path:
    """Directory that stands for ``main`` in worktree names.

    A hidden bare clone such as ``project/.bare``, which ``project/.git``
    points at, is represented by ``project``.
    """

    if not main.name.startswith("."):
        return main
    dotgit = main.parent / ".git"
    try:
        if not dotgit.is_file():
            return main
        content = dotgit.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return main
    if not content.startswith(_GITDIR_PREFIX):
        return main
    target = Path(content[len(_GITDIR_PREFIX):].strip())
    if not target.is_absolute():
        target = main.parent / target
    try:
        if canonicalize(target) == main:
            return main.parent
    except OSError:
        pass
    return main


def _plain(original: Path, resolved: Path) -> DirectoryEntry:
    return DirectoryEntry(
        original_path=original,
        resolved_path=resolved,
        display_name=resolved.name or original.name,
        kind=EntryKind.PLAIN,
    )


def _worktree_display_name(main: Path, name: str) -> str:
    return f"[{main.name}] {name}"


def scan_directories(config: ScanConfig, backend: RepositoryBackend | None = None) -> list[DirectoryEntry]:
    return DirectoryScanner(config, backend).scan()


__all__ = ["DirectoryScanner", "scan_directories"]
