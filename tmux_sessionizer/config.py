"""Configuration file loading and the runtime configuration record."""

from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigFileError, InvalidPatternError, PathValidationError
from .models import ScanConfig
from .paths import APP_NAME, config_dir, data_dir, expand_tilde

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = f"{APP_NAME}.toml"
DEFAULT_SEARCH_PATHS = ("~/.config",)
_LIST_KEYS = ("search_paths", "additional_paths", "exclude_patterns")


def default_config_file() -> Path:
    return config_dir() / CONFIG_FILE_NAME


@dataclass(frozen=True)
class FileConfig:
    """Settings as written in the TOML file, before any expansion."""

    search_paths: tuple[str, ...] | None = None
    additional_paths: tuple[str, ...] | None = None
    exclude_patterns: tuple[str, ...] | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any], path: Path) -> "FileConfig":
        unknown = sorted(set(data) - set(_LIST_KEYS))
        if unknown:
            raise ConfigFileError(path, f"unknown field(s): {', '.join(unknown)}")
        values: dict[str, tuple[str, ...]] = {}
        for key in _LIST_KEYS:
            if key not in data:
                continue
            raw = data[key]
            if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
                raise ConfigFileError(path, f"'{key}' must be a list of strings")
            values[key] = tuple(raw)
        return cls(**values)


def load_config_file(path: Path | None = None) -> FileConfig | None:
    """Read the configuration file; a missing file yields None."""

    path = path or default_config_file()
    if not path.exists():
        logger.debug("No configuration file at %s, using defaults", path)
        return None
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(path, str(exc)) from exc
    except OSError as exc:
        raise ConfigFileError(path, exc.strerror or str(exc)) from exc
    logger.debug("Loaded configuration file %s", path)
    return FileConfig.from_mapping(data, path)


def compile_patterns(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise InvalidPatternError(pattern, str(exc)) from exc
    return tuple(compiled)


@dataclass(frozen=True)
class Config:
    """Everything a single run needs: what to scan and how to behave."""

    search_paths: tuple[Path, ...] = ()
    additional_paths: tuple[Path, ...] = ()
    exclude_patterns: tuple[re.Pattern[str], ...] = field(default=())
    debug: bool = False
    direct_selection: str | None = None
    log_directory: Path | None = None

    @classmethod
    def build(
        cls,
        file_config: FileConfig | None = None,
        *,
        debug: bool = False,
        direct_selection: str | None = None,
        log_directory: Path | None = None,
    ) -> "Config":
        """Merge file settings with defaults, expanding ``~`` and compiling patterns.

        Raises:
            HomeNotFoundError: If a path starts with ``~`` and home is unknown.
            InvalidPatternError: If an exclusion pattern does not compile.
        """

        file_config = file_config or FileConfig()
        search = file_config.search_paths if file_config.search_paths is not None else DEFAULT_SEARCH_PATHS
        additional = file_config.additional_paths or ()
        patterns = file_config.exclude_patterns or ()
        return cls(
            search_paths=tuple(expand_tilde(item) for item in search),
            additional_paths=tuple(expand_tilde(item) for item in additional),
            exclude_patterns=compile_patterns(patterns),
            debug=debug,
            direct_selection=direct_selection,
            log_directory=log_directory or data_dir(),
        )

    def validate(self) -> None:
        for path in (*self.search_paths, *self.additional_paths):
            _validate_directory(path)

    def validation_problems(self) -> list[PathValidationError]:
        """Every failing path check, for reporting without aborting."""

        problems = []
        for path in (*self.search_paths, *self.additional_paths):
            try:
                _validate_directory(path)
            except PathValidationError as exc:
                problems.append(exc)
        return problems

    @property
    def scan_config(self) -> ScanConfig:
        return ScanConfig(
            search_paths=self.search_paths,
            additional_paths=self.additional_paths,
            exclude_patterns=self.exclude_patterns,
        )


def _validate_directory(path: Path) -> None:
    if not path.exists():
        raise PathValidationError(path, "Path does not exist")
    if not path.is_dir():
        raise PathValidationError(path, "Path is not a directory")


def load_config(
    path: Path | None = None,
    *,
    debug: bool = False,
    direct_selection: str | None = None,
) -> Config:
    return Config.build(load_config_file(path), debug=debug, direct_selection=direct_selection)


__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_SEARCH_PATHS",
    "default_config_file",
    "FileConfig",
    "load_config_file",
    "compile_patterns",
    "Config",
    "load_config",
]
