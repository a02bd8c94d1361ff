"""Tests for the CLI orchestration with collaborators mocked."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

from tmux_sessionizer import __version__
from tmux_sessionizer.cli import app
from tmux_sessionizer.config import Config
from tmux_sessionizer.exceptions import InvalidPatternError, PathValidationError, TmuxCommandError
from tmux_sessionizer.models import DirectoryEntry, EntryKind, SelectedItem


def _entry(path: str, display: str | None = None) -> DirectoryEntry:
    return DirectoryEntry(
        original_path=Path(path),
        resolved_path=Path(path),
        display_name=display or Path(path).name,
        kind=EntryKind.PLAIN,
    )


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.entries = [_entry("/x/alpha"), _entry("/x/my.project")]
        self.config = Config(search_paths=(Path("/x"),))

        def patch(name: str, **kwargs) -> mock.MagicMock:
            patcher = mock.patch(f"tmux_sessionizer.cli.{name}", **kwargs)
            self.addCleanup(patcher.stop)
            return patcher.start()

        self.load_config = patch("load_config")
        self.load_config.side_effect = lambda **kwargs: Config(
            search_paths=(Path("/x"),), direct_selection=kwargs.get("direct_selection"), debug=kwargs.get("debug", False)
        )
        self.setup_logging = patch("setup_logging")
        self.scan = patch("scan_directories", return_value=self.entries)
        self.finder = patch("FuzzyFinder")
        self.manager = patch("SessionManager")

    def test_version(self) -> None:
        result = self.runner.invoke(app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)
        self.load_config.assert_not_called()

    def test_direct_selection_opens_session(self) -> None:
        result = self.runner.invoke(app, ["my.project", "--debug"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("my-project", result.output)
        self.load_config.assert_called_once_with(debug=True, direct_selection="my.project")
        self.setup_logging.assert_called_once()
        self.finder.assert_not_called()
        self.manager.return_value.open.assert_called_once_with(self.entries[1])

    def test_bracketed_names_are_printed_literally(self) -> None:
        self.scan.return_value = [_entry("/x/[bold]odd")]

        result = self.runner.invoke(app, ["[bold]odd"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Session: [bold]odd", result.output)

    def test_interactive_selection_opens_session(self) -> None:
        self.finder.return_value.select.return_value = SelectedItem("alpha", Path("/x/alpha"))

        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 0, result.output)
        self.finder.return_value.select.assert_called_once_with(self.entries)
        self.manager.return_value.open.assert_called_once_with(self.entries[0])

    def test_cancelled_selection_exits_cleanly(self) -> None:
        self.finder.return_value.select.return_value = None

        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No selection made.", result.output)
        self.manager.return_value.open.assert_not_called()

    def test_unmatched_target_fails(self) -> None:
        result = self.runner.invoke(app, ["nothing-like-this"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("nothing-like-this", result.output)
        self.manager.return_value.open.assert_not_called()

    def test_ambiguous_target_lists_matches(self) -> None:
        self.scan.return_value = [_entry("/a/api"), _entry("/b/api")]

        result = self.runner.invoke(app, ["api"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("/a/api", result.output)
        self.assertIn("/b/api", result.output)

    def test_no_entries_without_target(self) -> None:
        self.scan.return_value = []

        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No directories found", result.output)
        self.finder.assert_not_called()

    def test_configuration_error_is_reported(self) -> None:
        self.load_config.side_effect = InvalidPatternError("(bad", "missing )")

        result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid regex pattern '(bad'", result.output)
        self.scan.assert_not_called()

    def test_validation_problems_are_only_warnings(self) -> None:
        self.finder.return_value.select.return_value = SelectedItem("alpha", Path("/x/alpha"))
        with mock.patch.object(
            Config, "validation_problems", return_value=[PathValidationError(Path("/gone"), "Path does not exist")]
        ), self.assertLogs("tmux_sessionizer.cli", level="WARNING"):
            result = self.runner.invoke(app, [])

        self.assertEqual(result.exit_code, 0, result.output)
        self.manager.return_value.open.assert_called_once()

    def test_tmux_failure_exits_non_zero(self) -> None:
        self.manager.return_value.open.side_effect = TmuxCommandError(["tmux", "attach-session"], 1, "no sessions")

        result = self.runner.invoke(app, ["alpha"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("no sessions", result.output)

    def test_init_writes_template_without_scanning(self) -> None:
        with mock.patch("tmux_sessionizer.cli.ConfigInitializer") as initializer:
            initializer.return_value.init_config.return_value = True
            initializer.return_value.config_file = Path("/cfg/tmux-sessionizer.toml")

            result = self.runner.invoke(app, ["--init"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("/cfg/tmux-sessionizer.toml", result.output)
        self.load_config.assert_not_called()
        self.scan.assert_not_called()


if __name__ == "__main__":
    unittest.main()
