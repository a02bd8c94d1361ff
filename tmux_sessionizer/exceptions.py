"""Custom exception hierarchy for tmux-sessionizer."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class SessionizerError(RuntimeError):
    """Base error for all custom exceptions."""


class ConfigError(SessionizerError):
    """Raised when the configuration cannot be loaded or is invalid."""


class ConfigFileError(ConfigError):
    """Raised when the configuration file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to load configuration file '{path}': {reason}")
        self.path = path
        self.reason = reason


class InvalidPatternError(ConfigError):
    """Raised when an exclusion pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid regex pattern '{pattern}' in configuration: {reason}")
        self.pattern = pattern
        self.reason = reason


class PathValidationError(ConfigError):
    """Raised when a configured path does not exist or is not a directory."""

    def __init__(self, path: Path, problem: str):
        super().__init__(f"{problem}: '{path}'")
        self.path = path
        self.problem = problem


class ConfigInitError(ConfigError):
    """Raised when the template configuration file cannot be written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to initialise configuration at '{path}': {reason}")
        self.path = path
        self.reason = reason


class HomeNotFoundError(ConfigError):
    """Raised when the user's home directory cannot be determined."""


class GitCommandError(SessionizerError):
    """Raised when a git invocation fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str | None = None):
        message = "Git command failed"
        if command:
            message = f"Git command failed: {' '.join(command)}"
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""
        if self.stderr.strip():
            message = f"{message}\n{self.stderr.strip()}"
        super().__init__(message)


class NotARepositoryError(SessionizerError):
    """Raised when a path does not hold a git repository."""

    def __init__(self, path: Path):
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class SelectionError(SessionizerError):
    """Raised when a selection cannot be resolved."""


class AmbiguousSelectionError(SelectionError):
    """Raised when a direct selection target matches more than one entry."""

    def __init__(self, target: str, strategy: str, matches: Sequence[object]):
        lines = "\n".join(f"  {match}" for match in matches)
        super().__init__(f"Ambiguous selection '{target}' ({strategy}) matches:\n{lines}")
        self.target = target
        self.strategy = strategy
        self.matches = list(matches)


class MalformedSelectionError(SelectionError):
    """Raised when the fuzzy selector returns a line we cannot parse."""


class UserAbort(SessionizerError):
    """Raised when the user cancels an interactive flow."""


class TmuxCommandError(SessionizerError):
    """Raised when a tmux invocation fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str | None = None):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""
        message = f"tmux command failed (exit {returncode}): {' '.join(command)}"
        if self.stderr.strip():
            message = f"{message}\n{self.stderr.strip()}"
        super().__init__(message)
