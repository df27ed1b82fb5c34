"""Unit tests for cli.add_command.AddCommand module."""

from unittest.mock import Mock

import pytest

from prosemark.cli.add_command import AddCommand
from prosemark.cli.init_command import InitCommand
from prosemark.cli.models import ExitCode
from prosemark.cli.output import OutputHandler
from prosemark.node.frontmatter_handler import FrontmatterHandler
from prosemark.workflow.editor_session import EditorSession
from prosemark.workflow.errors import EditorError
from prosemark.workflow.node_io import FileNodeCreationIO
from tests.helpers.node_fakes import FixedIDGenerator, RecordingEditor, SequenceClock


NODE_ID = "0192f0c1-2345-7abc-8def-0123456789ab"
PRAGMA = b"<!-- prosemark-binder:v1 -->\n"
T0 = "2026-10-19T12:00:00Z"
T1 = "2026-10-19T12:05:30Z"


@pytest.fixture
def project(tmp_path):
    InitCommand().run(str(tmp_path))
    return tmp_path


@pytest.fixture
def output():
    return Mock(spec=OutputHandler)


def make_command(output, editor=None, environ=None, io=None):
    return AddCommand(
        output_handler=output,
        io=io,
        clock=SequenceClock(T0, T1),
        id_generator=FixedIDGenerator(NODE_ID),
        editor=editor or RecordingEditor(),
        environ=environ if environ is not None else {'EDITOR': 'vim'},
    )


class UndeletableIO(FileNodeCreationIO):
    """Real file I/O whose rollback delete always fails."""

    def delete_file(self, path: str) -> None:
        raise OSError("device busy")


class TestAddCommandLink:
    """Test cases for linking an existing target."""

    def test_link_under_root(self, project, output):
        exit_code = make_command(output).run(target="chapter.md", project=str(project))

        assert exit_code == ExitCode.SUCCESS
        assert (project / "_binder.md").read_bytes() == PRAGMA + b"\n- [chapter](chapter.md)\n"
        output.success.assert_called_once_with(f"Added chapter.md to {project / '_binder.md'}")

    def test_link_does_not_create_the_file(self, project, output):
        make_command(output).run(target="chapter.md", project=str(project))

        assert not (project / "chapter.md").exists()

    def test_duplicate_is_reported_as_skipped(self, project, output):
        make_command(output).run(target="chapter.md", project=str(project))
        before = (project / "_binder.md").read_bytes()

        exit_code = make_command(output).run(target="chapter.md", project=str(project))

        assert exit_code == ExitCode.SUCCESS
        assert (project / "_binder.md").read_bytes() == before
        output.print.assert_called_once_with(f"chapter.md already in {project / '_binder.md'} (skipped)")
        diagnostics = output.print_diagnostics.call_args_list[-1].args[0]
        assert [d.code for d in diagnostics] == ["OPW002"]

    def test_unknown_parent_is_a_diagnostic_error(self, project, output):
        exit_code = make_command(output).run(parent="epilogue", target="x.md", project=str(project))

        assert exit_code == ExitCode.DIAGNOSTIC_ERROR
        assert (project / "_binder.md").read_bytes() == PRAGMA
        diagnostics = output.print_diagnostics.call_args.args[0]
        assert "OPE001" in [d.code for d in diagnostics]
        output.error.assert_called_once_with("add has errors")

    def test_json_output(self, project, output):
        exit_code = make_command(output).run(target="chapter.md", json_mode=True, project=str(project))

        assert exit_code == ExitCode.SUCCESS
        output.print_json.assert_called_once_with({'version': '1', 'changed': True, 'diagnostics': []})
        output.success.assert_not_called()


class TestAddCommandUsage:
    """Test cases for flag validation; nothing is touched on failure."""

    def test_conflicting_position_flags(self, project, output):
        exit_code = make_command(output).run(target="x.md", first=True, at=0, project=str(project))

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert "OPE010" in output.error.call_args.args[0]
        assert (project / "_binder.md").read_bytes() == PRAGMA

    def test_edit_requires_new(self, project, output):
        exit_code = make_command(output).run(target="x.md", edit=True, project=str(project))

        assert exit_code == ExitCode.VALIDATION_ERROR
        output.error.assert_called_once_with("--edit requires --new")

    def test_target_required_without_new(self, project, output):
        exit_code = make_command(output).run(project=str(project))

        assert exit_code == ExitCode.VALIDATION_ERROR

    def test_uninitialized_project(self, tmp_path, output):
        exit_code = make_command(output).run(target="x.md", project=str(tmp_path))

        assert exit_code == ExitCode.GENERAL_ERROR
        assert "pmk init" in output.error.call_args.args[0]
        assert not (tmp_path / "_binder.md").exists()


class TestAddCommandNew:
    """Test cases for --new."""

    def test_new_node_is_created_and_linked(self, project, output):
        exit_code = make_command(output).run(new=True, title="Chapter One", project=str(project))

        assert exit_code == ExitCode.SUCCESS
        assert (project / "_binder.md").read_bytes() == PRAGMA + f"\n- [Chapter One]({NODE_ID}.md)\n".encode()
        fm, body = FrontmatterHandler.parse((project / f"{NODE_ID}.md").read_bytes())
        assert fm.id == NODE_ID
        assert fm.created == fm.updated == T0
        assert body == b""
        output.success.assert_called_once_with(f"Created {NODE_ID}.md in {project / '_binder.md'}")

    def test_new_without_title_or_synopsis_is_rejected(self, project, output):
        exit_code = make_command(output).run(new=True, project=str(project))

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert sorted(p.name for p in project.iterdir()) == [".prosemark.yml", "_binder.md"]

    def test_new_with_bad_parent_rolls_back(self, project, output):
        exit_code = make_command(output).run(new=True, title="x", parent="missing", project=str(project))

        assert exit_code == ExitCode.DIAGNOSTIC_ERROR
        assert not (project / f"{NODE_ID}.md").exists()
        assert (project / "_binder.md").read_bytes() == PRAGMA

    def test_new_with_edit_opens_editor_and_refreshes(self, project, output):
        editor = RecordingEditor()

        exit_code = make_command(output, editor=editor).run(new=True, title="x", edit=True, project=str(project))

        assert exit_code == ExitCode.SUCCESS
        assert editor.opened == [("vim", str(project / f"{NODE_ID}.md"))]
        fm, _ = FrontmatterHandler.parse((project / f"{NODE_ID}.md").read_bytes())
        assert fm.created == T0
        assert fm.updated == T1

    def test_editor_from_config_when_environment_blank(self, project, output):
        (project / ".prosemark.yml").write_text("editor: nano -w\n")
        editor = RecordingEditor()

        make_command(output, editor=editor, environ={'EDITOR': '  '}).run(
            new=True, title="x", edit=True, project=str(project)
        )

        assert editor.opened[0][0] == "nano -w"

    def test_editor_failure_keeps_node(self, project, output):
        editor = RecordingEditor(error=EditorError("opening editor: vim exited with code 1", returncode=1))

        exit_code = make_command(output, editor=editor).run(new=True, title="x", edit=True, project=str(project))

        assert exit_code == ExitCode.EDITOR_ERROR
        assert (project / f"{NODE_ID}.md").exists()
        assert f"({NODE_ID}.md)".encode() in (project / "_binder.md").read_bytes()
        output.warning.assert_called_once_with("the node was created and added to the binder; its file was kept")

    def test_unconfigured_editor_never_launches(self, project, output):
        runner = Mock()

        exit_code = make_command(output, editor=EditorSession(runner=runner), environ={}).run(
            new=True, title="x", edit=True, project=str(project)
        )

        assert exit_code == ExitCode.EDITOR_ERROR
        runner.assert_not_called()
        output.error.assert_called_once_with("$EDITOR is not set")
        assert (project / f"{NODE_ID}.md").exists()

    def test_new_json_output(self, project, output):
        make_command(output).run(new=True, title="x", json_mode=True, project=str(project))

        output.print_json.assert_called_once_with({'version': '1', 'changed': True, 'diagnostics': []})
        output.success.assert_not_called()

    def test_failed_rollback_still_reports_diagnostics(self, project, output):
        exit_code = make_command(output, io=UndeletableIO()).run(
            new=True, title="x", parent="missing", project=str(project)
        )

        assert exit_code == ExitCode.GENERAL_ERROR
        diagnostics = output.print_diagnostics.call_args.args[0]
        assert [d.code for d in diagnostics] == ["OPE001"]
        message = output.error.call_args.args[0]
        assert "add has errors" in message
        assert "rollback also failed: device busy" in message
        assert (project / "_binder.md").read_bytes() == PRAGMA

    def test_editor_failure_still_reports_mutation_warnings(self, project, output):
        (project / "_binder.md").write_bytes(PRAGMA + b"- [Draft](one/draft.md)\n- [Draft](two/draft.md)\n")
        editor = RecordingEditor(error=EditorError("opening editor: vim exited with code 1", returncode=1))

        exit_code = make_command(output, editor=editor).run(
            new=True, title="x", parent="draft", edit=True, project=str(project)
        )

        assert exit_code == ExitCode.EDITOR_ERROR
        diagnostics = output.print_diagnostics.call_args.args[0]
        assert [d.code for d in diagnostics] == ["OPW001"]
        output.warning.assert_called_once_with("the node was created and added to the binder; its file was kept")

    def test_editor_failure_json_reports_committed_change(self, project, output):
        editor = RecordingEditor(error=EditorError("opening editor: vim exited with code 1", returncode=1))

        make_command(output, editor=editor).run(new=True, title="x", edit=True, json_mode=True, project=str(project))

        output.print_json.assert_called_once_with({'version': '1', 'changed': True, 'diagnostics': []})
