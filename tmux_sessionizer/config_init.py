"""Write a commented template configuration file for first-time users."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import default_config_file
from .exceptions import ConfigInitError

logger = logging.getLogger(__name__)

TEMPLATE = """\
# Configuration for tmux-sessionizer
#
# Every setting below is commented out, so the built-in defaults apply until
# you uncomment and edit one. This file lives at:
# ~/.config/tmux-sessionizer/tmux-sessionizer.toml
# (or under $XDG_CONFIG_HOME when that is set)

# --- Search paths ---
#
# Directories whose immediate children are offered as session targets.
# Git repositories among them are listed together with their linked
# worktrees. A leading '~' expands to your home directory.
# Defaults to ["~/.config"].
#
# search_paths = [
#   "~/dev",
#   "~/work",
# ]


# --- Additional paths ---
#
# Single directories to offer as targets themselves, without scanning
# their children. Handy for one-off projects outside the search paths.
#
# additional_paths = [
#   "~/clients/project-x",
#   "/srv/shared/team-notes",
# ]


# --- Exclusion patterns ---
#
# Regular expressions matched anywhere in the absolute path of each
# candidate. Anything that matches is left out of the list.
# Escape regex metacharacters, e.g. '\\.' for a literal dot.
#
# exclude_patterns = [
#   "/node_modules/",
#   "/target/",
#   "/\\.venv/",
#   "/__pycache__/",
#   "archived-",
# ]
"""


class ConfigInitializer:
    """Create the configuration directory and a template file inside it."""

    def __init__(self, config_file: Path | None = None):
        self.config_file = config_file or default_config_file()
        self.config_dir = self.config_file.parent

    def init_config(self) -> bool:
        """Return True when a new template was written, False if one already existed."""

        self._create_config_directory()
        created = self._write_template()
        self._validate_created_file()
        return created

    def _create_config_directory(self) -> None:
        if self.config_dir.is_dir():
            logger.debug("Config directory already exists: %s", self.config_dir)
            return
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigInitError(self.config_dir, f"could not create directory: {exc}") from exc
        logger.info("Created config directory %s", self.config_dir)

    def _write_template(self) -> bool:
        if self.config_file.exists():
            logger.info("Config file already exists: %s", self.config_file)
            return False
        try:
            self.config_file.write_text(TEMPLATE, encoding="utf-8")
        except OSError as exc:
            raise ConfigInitError(self.config_file, f"could not write template: {exc}") from exc
        logger.info("Created config template %s", self.config_file)
        return True

    def _validate_created_file(self) -> None:
        if not self.config_file.exists():
            raise ConfigInitError(self.config_file, "config file was not created")
        if not self.config_file.is_file():
            raise ConfigInitError(self.config_file, "path exists but is not a file")


__all__ = ["TEMPLATE", "ConfigInitializer"]
