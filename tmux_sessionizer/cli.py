"""Typer CLI entrypoint for tmux-sessionizer."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import Config, load_config
from .config_init import ConfigInitializer
from .exceptions import SelectionError, SessionizerError, UserAbort
from .logs import setup_logging
from .models import DirectoryEntry, SelectedItem
from .scanner import scan_directories
from .selector import FuzzyFinder, direct_select
from .sessions import SessionManager, session_name

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Pick a project directory or git worktree and open it as a tmux session.",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tmux-sessionizer {__version__}")
        raise typer.Exit()


@app.command()
def main(
    target: Optional[str] = typer.Argument(
        None,
        help="Select this directory directly (path, path suffix, display name or base name) instead of prompting.",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Show debug logging on stderr."),
    init: bool = typer.Option(False, "--init", help="Write a template configuration file and exit."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the tmux-sessionizer version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    try:
        if init:
            _init_config()
            return
        _run(target, debug)
    except UserAbort:
        console.print("No selection made.")
    except SessionizerError as exc:
        _fail(str(exc))


def _init_config() -> None:
    initializer = ConfigInitializer()
    if initializer.init_config():
        console.print(f"Created configuration template at {escape(str(initializer.config_file))}")
    else:
        console.print(f"Configuration file already exists at {escape(str(initializer.config_file))}")


def _run(target: str | None, debug: bool) -> None:
    config = load_config(debug=debug, direct_selection=target)
    setup_logging(config.debug, config.log_directory)
    logger.debug("Starting with config: %s", config)
    for problem in config.validation_problems():
        logger.warning("Configuration problem: %s", problem)

    entries = scan_directories(config.scan_config)
    if not entries and config.direct_selection is None:
        console.print("No directories found in the configured search paths.")
        return

    entry = _select_entry(entries, config)
    name = session_name(entry)
    console.print(f"Session: [bold]{escape(name)}[/bold]")
    SessionManager().open(entry)


def _select_entry(entries: Sequence[DirectoryEntry], config: Config) -> DirectoryEntry:
    if config.direct_selection is not None:
        item = direct_select(entries, config.direct_selection)
        if item is None:
            raise SelectionError(f"No directory matches '{config.direct_selection}'.")
    else:
        item = FuzzyFinder().select(entries)
        if item is None:
            raise UserAbort("No selection made.")
    return _find_entry(entries, item)


def _find_entry(entries: Sequence[DirectoryEntry], item: SelectedItem) -> DirectoryEntry:
    for entry in entries:
        if item.matches(entry):
            return entry
    raise SelectionError(f"Selected directory is not among the scanned entries: {item.path}")


def _fail(message: str, code: int = 1) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
