"""Dataclasses shared across modules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    PLAIN = "plain"
    MAIN_REPOSITORY = "main-repository"
    WORKTREE = "worktree"


@dataclass(frozen=True)
class ScanConfig:
    """Roots, extra candidates and exclusions for a single scan."""

    search_paths: tuple[Path, ...] = ()
    additional_paths: tuple[Path, ...] = ()
    exclude_patterns: tuple[re.Pattern[str], ...] = field(default=())

    def is_excluded(self, *paths: Path) -> re.Pattern[str] | None:
        """Return the first pattern matching any of ``paths``."""

        for pattern in self.exclude_patterns:
            for path in paths:
                if pattern.search(str(path)):
                    return pattern
        return None


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory presented to the user as a session target."""

    original_path: Path
    resolved_path: Path
    display_name: str
    kind: EntryKind
    parent_path: Path | None = None

    def __post_init__(self) -> None:
        if self.kind is EntryKind.WORKTREE and self.parent_path is None:
            raise ValueError("Worktree entries require a parent path.")
        if self.kind is not EntryKind.WORKTREE and self.parent_path is not None:
            raise ValueError("Only worktree entries carry a parent path.")

    @property
    def is_worktree(self) -> bool:
        return self.kind is EntryKind.WORKTREE

    def __str__(self) -> str:
        return f"{self.display_name} ({self.resolved_path})"


@dataclass(frozen=True)
class WorktreeRecord:
    """A linked worktree as reported by the repository backend."""

    name: str
    path: Path


@dataclass(frozen=True)
class SelectedItem:
    """The line chosen in the selector, split back into its two fields."""

    display_name: str
    path: Path

    def matches(self, entry: DirectoryEntry) -> bool:
        return entry.resolved_path == self.path and entry.display_name == self.display_name


__all__ = [
    "EntryKind",
    "ScanConfig",
    "DirectoryEntry",
    "WorktreeRecord",
    "SelectedItem",
]
