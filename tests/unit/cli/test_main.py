"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application end to end using CliRunner and a real
project directory.
"""

import json
import logging
import re
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from prosemark.cli.main import VERSION, _configure_logging, app
from prosemark.cli.models import ExitCode
from prosemark.node.frontmatter_handler import FrontmatterHandler


runner = CliRunner()

PRAGMA = b"<!-- prosemark-binder:v1 -->\n"
LINK_PATTERN = re.compile(rb"\[Chapter One\]\(([0-9a-f-]+)\.md\)")


def init_project(path):
    result = runner.invoke(app, ["--no-color", "init", "--project", str(path)])
    assert result.exit_code == ExitCode.SUCCESS, result.output


def created_node_id(path) -> str:
    match = LINK_PATTERN.search((path / "_binder.md").read_bytes())
    assert match is not None
    return match.group(1).decode()


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    def test_verbosity_0_sets_warning_level(self):
        """Verbosity 0 sets logging to WARNING level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(0)

            mock_get_logger.assert_called_with("prosemark")
            mock_app_logger.setLevel.assert_called_with(logging.WARNING)

    def test_verbosity_1_sets_info_level(self):
        """Verbosity 1 sets logging to INFO level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(1)

            mock_app_logger.setLevel.assert_called_with(logging.INFO)

    def test_verbosity_2_sets_debug_level(self):
        """Verbosity 2+ sets logging to DEBUG level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(2)

            mock_app_logger.setLevel.assert_called_with(logging.DEBUG)

    def test_logdir_creates_log_file(self, tmp_path):
        logdir = tmp_path / "logs"

        _configure_logging(1, str(logdir))

        log_files = list(logdir.glob("pmk_*.log"))
        assert len(log_files) == 1

    def test_repeated_calls_do_not_stack_handlers(self):
        _configure_logging(0)
        _configure_logging(0)

        assert len(logging.getLogger("prosemark").handlers) == 1

    def test_reconfiguring_closes_previous_log_file(self, tmp_path):
        _configure_logging(1, str(tmp_path / "logs"))
        app_logger = logging.getLogger("prosemark")
        file_handler = next(h for h in app_logger.handlers if isinstance(h, logging.FileHandler))
        logging.getLogger("prosemark.cli").info("first run")

        _configure_logging(0)

        assert file_handler.stream is None
        assert file_handler not in app_logger.handlers
        assert len(app_logger.handlers) == 1
        assert "first run" in Path(file_handler.baseFilename).read_text(encoding="utf-8")


class TestGlobalOptions:
    """Test cases for the app callback."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"pmk version {VERSION}" in result.output

    def test_no_arguments_shows_help(self):
        result = runner.invoke(app, [])

        assert "init" in result.output
        assert "add" in result.output


class TestInitCommand:
    """Test cases for pmk init."""

    def test_init_creates_project(self, tmp_path):
        result = runner.invoke(app, ["--no-color", "init", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Initialized" in result.output
        assert (tmp_path / "_binder.md").read_bytes() == PRAGMA
        assert (tmp_path / ".prosemark.yml").exists()

    def test_init_twice_fails(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(app, ["--no-color", "init", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "already exists" in result.output

    def test_init_force_warns(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(app, ["--no-color", "init", "--project", str(tmp_path), "--force"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "warning: overwriting existing files" in result.output

    def test_empty_project_flag(self):
        result = runner.invoke(app, ["--no-color", "init", "--project", ""])

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert "--project flag cannot be empty" in result.output


class TestAddCommand:
    """Test cases for pmk add."""

    def test_add_new_creates_linked_node(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(app, ["--no-color", "add", "--new", "--title", "Chapter One", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS, result.output
        node_id = created_node_id(tmp_path)
        fm, body = FrontmatterHandler.parse((tmp_path / f"{node_id}.md").read_bytes())
        assert fm.id == node_id
        assert fm.title == "Chapter One"
        assert body == b""
        assert f"Created {node_id}.md" in result.output

    def test_add_link_json(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(app, ["add", "--target", "intro.md", "--json", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert json.loads(result.stdout) == {'version': '1', 'changed': True, 'diagnostics': []}

    def test_conflicting_flags(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(
            app,
            ["--no-color", "add", "--target", "x.md", "--first", "--before", "y", "--project", str(tmp_path)],
        )

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert "OPE010" in result.output
        assert (tmp_path / "_binder.md").read_bytes() == PRAGMA

    def test_unknown_parent_exits_with_diagnostics(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(
            app,
            ["--no-color", "add", "--parent", "nowhere", "--target", "x.md", "--project", str(tmp_path)],
        )

        assert result.exit_code == ExitCode.DIAGNOSTIC_ERROR
        assert "(OPE001)" in result.output

    def test_uninitialized_project(self, tmp_path):
        result = runner.invoke(app, ["--no-color", "add", "--target", "x.md", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "pmk init" in result.output

    def test_add_new_edit_without_editor_keeps_node(self, tmp_path):
        init_project(tmp_path)

        with patch('subprocess.run') as mock_run:
            result = runner.invoke(
                app,
                ["--no-color", "add", "--new", "--title", "Chapter One", "--edit", "--project", str(tmp_path)],
                env={"EDITOR": "\t"},
            )

        assert result.exit_code == ExitCode.EDITOR_ERROR
        assert "$EDITOR is not set" in result.output
        mock_run.assert_not_called()
        node_id = created_node_id(tmp_path)
        assert (tmp_path / f"{node_id}.md").exists()


class TestEditCommand:
    """Test cases for pmk edit."""

    def test_edit_launches_editor_on_draft(self, tmp_path):
        init_project(tmp_path)
        runner.invoke(app, ["add", "--new", "--title", "Chapter One", "--project", str(tmp_path)])
        node_id = created_node_id(tmp_path)

        with patch('subprocess.run', return_value=subprocess.CompletedProcess([], 0)) as mock_run:
            result = runner.invoke(
                app,
                ["--no-color", "edit", node_id, "--project", str(tmp_path)],
                env={"EDITOR": "vim -n"},
            )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        mock_run.assert_called_once_with(["vim", "-n", str(tmp_path / f"{node_id}.md")], check=False)

    def test_edit_notes_part(self, tmp_path):
        init_project(tmp_path)
        runner.invoke(app, ["add", "--new", "--title", "Chapter One", "--project", str(tmp_path)])
        node_id = created_node_id(tmp_path)

        with patch('subprocess.run', return_value=subprocess.CompletedProcess([], 0)):
            result = runner.invoke(
                app,
                ["--no-color", "edit", node_id, "--part", "notes", "--project", str(tmp_path)],
                env={"EDITOR": "vim"},
            )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert (tmp_path / f"{node_id}.notes.md").exists()

    def test_edit_without_editor(self, tmp_path):
        init_project(tmp_path)

        result = runner.invoke(app, ["--no-color", "edit", "anything", "--project", str(tmp_path)], env={"EDITOR": ""})

        assert result.exit_code == ExitCode.EDITOR_ERROR
        assert "$EDITOR is not set" in result.output

    def test_edit_failing_editor(self, tmp_path):
        init_project(tmp_path)
        runner.invoke(app, ["add", "--new", "--title", "Chapter One", "--project", str(tmp_path)])
        node_id = created_node_id(tmp_path)

        with patch('subprocess.run', return_value=subprocess.CompletedProcess([], 3)):
            result = runner.invoke(
                app,
                ["--no-color", "edit", node_id, "--project", str(tmp_path)],
                env={"EDITOR": "vim"},
            )

        assert result.exit_code == ExitCode.EDITOR_ERROR
        assert "exited with code 3" in result.output


class TestParseCommand:
    """Test cases for pmk parse."""

    def test_parse_json_after_add(self, tmp_path):
        init_project(tmp_path)
        runner.invoke(app, ["add", "--target", "intro.md", "--title", "Intro", "--project", str(tmp_path)])

        result = runner.invoke(app, ["parse", "--json", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert json.loads(result.stdout) == {
            'version': '1',
            'root': {
                'type': 'root',
                'children': [{'type': 'node', 'target': 'intro.md', 'title': 'Intro', 'children': []}],
            },
            'diagnostics': [],
        }

    def test_parse_errors_exit_with_diagnostic_error(self, tmp_path):
        init_project(tmp_path)
        (tmp_path / "_binder.md").write_bytes(PRAGMA + b"- [A](../outside.md)\n")

        result = runner.invoke(app, ["--no-color", "parse", "--project", str(tmp_path)])

        assert result.exit_code == ExitCode.DIAGNOSTIC_ERROR
        assert "(BNDE002)" in result.output
        assert "binder has parse errors" in result.output
