"""Filesystem path helpers for tmux-sessionizer."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .exceptions import HomeNotFoundError

logger = logging.getLogger(__name__)

APP_NAME = "tmux-sessionizer"


def home_dir() -> Path:
    """Return the current user's home directory."""

    try:
        home = Path.home()
    except (KeyError, RuntimeError) as exc:
        raise HomeNotFoundError("Could not determine the home directory.") from exc
    if not str(home) or str(home) == "~":
        raise HomeNotFoundError("Could not determine the home directory.")
    return home


def expand_tilde(path: Path | str) -> Path:
    """Replace a leading ``~`` segment with the user's home directory.

    Only the bare ``~`` segment is expanded; ``~other`` is left untouched.
    Paths that do not start with ``~`` are returned unchanged.
    """

    path = Path(path)
    parts = path.parts
    if not parts or parts[0] != "~":
        return path
    expanded = home_dir().joinpath(*parts[1:])
    logger.debug("Expanded %s to %s", path, expanded)
    return expanded


def canonicalize(path: Path) -> Path:
    """Resolve symlinks and relative segments; the path must exist."""

    return Path(os.path.realpath(path, strict=True))


def xdg_dir(env_var: str, fallback: str) -> Path:
    """Return an XDG base directory, falling back to ``~/<fallback>``."""

    raw = os.environ.get(env_var)
    if raw and Path(raw).is_absolute():
        return Path(raw)
    return home_dir() / fallback


def config_dir() -> Path:
    return xdg_dir("XDG_CONFIG_HOME", ".config") / APP_NAME


def data_dir() -> Path:
    return xdg_dir("XDG_DATA_HOME", ".local/share") / APP_NAME


__all__ = [
    "APP_NAME",
    "home_dir",
    "expand_tilde",
    "canonicalize",
    "config_dir",
    "data_dir",
]
