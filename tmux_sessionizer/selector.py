"""Selecting a directory entry, interactively or from a CLI argument."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import AmbiguousSelectionError, HomeNotFoundError, MalformedSelectionError, SelectionError
from .models import DirectoryEntry, SelectedItem
from .paths import canonicalize, expand_tilde

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"

# Takes the formatted lines, returns the chosen line or None when cancelled.
Picker = Callable[[Sequence[str]], Optional[str]]


def format_entry(entry: DirectoryEntry) -> str:
    return f"{entry.display_name}{FIELD_SEPARATOR}{entry.resolved_path}"


def prepare_input(entries: Sequence[DirectoryEntry]) -> str:
    """Newline-joined selector input, one ``display<TAB>path`` line per entry."""

    return "\n".join(format_entry(entry) for entry in entries)


def parse_line(line: str) -> SelectedItem:
    display_name, sep, path = line.rstrip("\n").partition(FIELD_SEPARATOR)
    if not sep:
        raise MalformedSelectionError(
            f"Selected line has unexpected format (expected 'display\\tpath'): {line!r}"
        )
    return SelectedItem(display_name=display_name, path=Path(path))


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise SelectionError(
            "Interactive mode requires a TTY. Pass a target name or path to select it directly."
        )


def inquirer_picker(lines: Sequence[str]) -> str | None:
    """Fuzzy-select one line with InquirerPy; escape or Ctrl-C cancels."""

    _ensure_tty()
    choices = []
    for line in lines:
        display_name, _, path = line.partition(FIELD_SEPARATOR)
        choices.append(Choice(value=line, name=f"{display_name} · {path}"))
    try:
        result = inquirer.fuzzy(
            message="Select project:",
            choices=choices,
            mandatory=False,
            keybindings={"skip": [{"key": "escape"}]},
        ).execute()
    except KeyboardInterrupt:
        logger.debug("Selection cancelled with Ctrl-C")
        return None
    return result


class FuzzyFinder:
    """Present entries in a fuzzy selector and map the answer back."""

    def __init__(self, picker: Picker | None = None):
        self.picker = picker or inquirer_picker

    def select(self, entries: Sequence[DirectoryEntry]) -> SelectedItem | None:
        if not entries:
            logger.debug("No entries to select from")
            return None
        lines = [format_entry(entry) for entry in entries]
        logger.debug("Selector input prepared with %d entries", len(lines))
        chosen = self.picker(lines)
        if not chosen:
            logger.debug("Selector returned no line")
            return None
        item = parse_line(chosen)
        logger.debug("Selected %s at %s", item.display_name, item.path)
        return item


def _unique(
    target: str,
    strategy: str,
    entries: Sequence[DirectoryEntry],
    predicate: Callable[[DirectoryEntry], bool],
) -> DirectoryEntry | None:
    matches = [entry for entry in entries if predicate(entry)]
    if len(matches) > 1:
        raise AmbiguousSelectionError(target, strategy, matches)
    return matches[0] if matches else None


def _first(entries: Sequence[DirectoryEntry], predicate: Callable[[DirectoryEntry], bool]) -> DirectoryEntry | None:
    return next((entry for entry in entries if predicate(entry)), None)


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = suffix.parts
    if not tail:
        return False
    return path.parts[-len(tail):] == tail


def direct_select(entries: Sequence[DirectoryEntry], target: str) -> SelectedItem | None:
    """Resolve ``target`` against ``entries`` without prompting.

    Strategies are tried in order and the first unique hit wins:

    1. canonical path equality with the resolved path,
    2. equality with the original path,
    3. the resolved path ends with ``target``,
    4. display name equality,
    5. base name equality.

    More than one hit for strategies 3 to 5 raises AmbiguousSelectionError.
    Returns None when nothing matches.
    """

    target_path = Path(target)
    try:
        canonical = canonicalize(expand_tilde(target_path))
    except (OSError, HomeNotFoundError) as exc:
        logger.debug("Could not canonicalize %s, skipping path equality: %s", target, exc)
        canonical = None

    match: DirectoryEntry | None = None
    if canonical is not None:
        match = _first(entries, lambda entry: entry.resolved_path == canonical)
    if match is None:
        match = _first(entries, lambda entry: entry.original_path == target_path)
    if match is None:
        match = _unique(target, "path suffix", entries, lambda entry: _ends_with(entry.resolved_path, target_path))
    if match is None:
        match = _unique(target, "display name", entries, lambda entry: entry.display_name == target)
    if match is None:
        match = _unique(target, "base name", entries, lambda entry: entry.resolved_path.name == target)

    if match is None:
        logger.info("Direct selection target %r matched nothing", target)
        return None
    logger.info("Direct selection %r resolved to %s", target, match.resolved_path)
    return SelectedItem(display_name=match.display_name, path=match.resolved_path)


__all__ = [
    "FIELD_SEPARATOR",
    "format_entry",
    "prepare_input",
    "parse_line",
    "inquirer_picker",
    "FuzzyFinder",
    "direct_select",
]
