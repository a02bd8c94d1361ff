"""Session naming and thin wrappers around tmux commands."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Iterable, Mapping

from .exceptions import TmuxCommandError
from .models import DirectoryEntry

logger = logging.getLogger(__name__)

_UNSAFE_PATTERN = re.compile(r"[.:]")
_NO_SERVER_MESSAGES = ("no server running", "failed to connect to server", "error connecting to")


def _basename_or(path: Path | None, fallback: str) -> str:
    name = path.name if path is not None else ""
    if not name or name == "/":
        return fallback
    return name


def session_name(entry: DirectoryEntry) -> str:
    """Derive a tmux-safe session name for ``entry``.

    Worktrees are prefixed with their parent repository's name so that
    ``feature`` checked out from two repositories gets two sessions.
    """

    item = _basename_or(entry.resolved_path, "default_session")
    if entry.is_worktree:
        parent = _basename_or(entry.parent_path, "default_parent")
        raw = f"{parent}_{item}"
    else:
        raw = item
    name = _UNSAFE_PATTERN.sub("-", raw)
    logger.debug("Generated session name %r for %s", name, entry.resolved_path)
    return name


def run_tmux(
    args: Iterable[str],
    *,
    interactive: bool = False,
    raise_on_error: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a tmux command; interactive commands keep the terminal."""

    cmd = ["tmux", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=not interactive,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise TmuxCommandError(cmd, 127, str(exc)) from exc
    if raise_on_error and proc.returncode != 0:
        raise TmuxCommandError(cmd, proc.returncode, proc.stderr)
    return proc


def _server_unavailable(stderr: str | None) -> bool:
    text = (stderr or "").lower()
    return any(message in text for message in _NO_SERVER_MESSAGES)


class SessionManager:
    """Create, find and attach to tmux sessions."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def inside_tmux(self) -> bool:
        return bool(self.environ.get("TMUX"))

    def is_server_running(self) -> bool:
        proc = run_tmux(["list-sessions"], raise_on_error=False)
        if proc.returncode == 0:
            return True
        if _server_unavailable(proc.stderr):
            logger.debug("tmux server is not running")
            return False
        raise TmuxCommandError(list(proc.args), proc.returncode, proc.stderr)

    def session_exists(self, name: str) -> bool:
        proc = run_tmux(["has-session", "-t", f"={name}"], raise_on_error=False)
        if proc.returncode == 0:
            return True
        if _server_unavailable(proc.stderr):
            logger.debug("tmux server is not running, so session %s cannot exist", name)
        return False

    def create_session(self, name: str, start_dir: Path) -> None:
        args = ["new-session", "-s", name, "-c", str(start_dir)]
        detached = self.inside_tmux()
        if detached:
            args.insert(1, "-d")
        logger.info("Creating session %s at %s (detached=%s)", name, start_dir, detached)
        run_tmux(args, interactive=not detached)

    def switch_or_attach(self, name: str) -> None:
        if self.inside_tmux():
            logger.info("Switching client to session %s", name)
            run_tmux(["switch-client", "-t", f"={name}"])
        else:
            logger.info("Attaching to session %s", name)
            run_tmux(["attach-session", "-t", f"={name}"], interactive=True)

    def open(self, entry: DirectoryEntry) -> str:
        """Switch to the session for ``entry``, creating it first when needed."""

        name = session_name(entry)
        if self.is_server_running() and self.session_exists(name):
            self.switch_or_attach(name)
            return name
        self.create_session(name, entry.resolved_path)
        if self.inside_tmux():
            self.switch_or_attach(name)
        return name


__all__ = ["session_name", "run_tmux", "SessionManager"]
