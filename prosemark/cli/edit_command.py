"""EditCommand: open an existing node's draft or notes in the editor."""

import logging
import os
from typing import Mapping, Optional

from prosemark.binder.errors import BinderParseError
from prosemark.binder.parser import find_target, parse_binder
from prosemark.errors import ProsemarkError
from prosemark.node.clock import SystemClock, TimeSource
from prosemark.node.models import NodePart
from prosemark.workflow.editor_session import EditorSession, is_editor_configured
from prosemark.workflow.errors import EditorError, EditorNotConfiguredError, StepError
from prosemark.workflow.node_io import EditIO, FileNodeCreationIO
from prosemark.workflow.post_edit_refresher import PostEditRefresher
from .config import CONFIG_FILENAME, ConfigLoader, resolve_binder_path, resolve_editor_spec
from .errors import NodeNotFoundError, ProjectNotInitializedError, UsageError, exit_code_for
from .models import ExitCode
from .output import OutputHandler, sanitize_path

logger = logging.getLogger(__name__)

NOTES_SUFFIX = ".notes.md"


class EditCommand:
    """Opens a node file in the editor, then refreshes the draft's timestamp.

    The draft's ``updated`` field is refreshed after either part is edited.
    A notes file that does not exist yet is created empty first, and removed
    again if the editor fails.

    Example:
        >>> exit_code = EditCommand().run("0192f0c1-2345-7abc-8def-0123456789ab", part="notes")
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        io: Optional[EditIO] = None,
        clock: Optional[TimeSource] = None,
        editor: Optional[EditorSession] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.output_handler = output_handler or OutputHandler()
        self.io = io or FileNodeCreationIO()
        self.clock = clock or SystemClock()
        self.editor = editor or EditorSession()
        self.environ = os.environ if environ is None else environ

    def run(self, node_id: str, part: str = NodePart.DRAFT.value, project: Optional[str] = None) -> ExitCode:
        """Execute the edit command and translate failures to exit codes.

        Args:
            node_id: Node ID (the filename stem)
            part: "draft" or "notes"
            project: Project directory (default: working directory)

        Returns:
            ExitCode for the process
        """
        try:
            self._edit(node_id, part, project)
            return ExitCode.SUCCESS
        except ProsemarkError as e:
            logger.error(f"edit failed: {e}")
            self.output_handler.error(str(e))
            return exit_code_for(e)
        except Exception as e:
            logger.exception("Unexpected error during edit")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _edit(self, node_id: str, part: str, project: Optional[str]) -> None:
        binder_path = resolve_binder_path(project)
        project_dir = os.path.dirname(binder_path)

        config = ConfigLoader.load(os.path.join(project_dir, CONFIG_FILENAME))
        editor_spec = resolve_editor_spec(self.environ, config)
        if not is_editor_configured(editor_spec):
            raise EditorNotConfiguredError()

        try:
            node_part = NodePart(part)
        except ValueError:
            raise UsageError(f'--part must be "draft" or "notes", got {part!r}')

        try:
            binder_bytes = self.io.read_binder(binder_path)
        except FileNotFoundError:
            raise ProjectNotInitializedError(binder_path)
        except Exception as e:
            raise StepError("reading binder", e) from e

        try:
            parsed, _ = parse_binder(binder_bytes)
        except BinderParseError as e:
            raise StepError("parsing binder", e) from e

        if not find_target(parsed.root, node_id + ".md"):
            raise NodeNotFoundError(node_id)

        draft_path = os.path.join(project_dir, node_id + ".md")
        notes_path = os.path.join(project_dir, node_id + NOTES_SUFFIX)

        notes_created = False
        if node_part == NodePart.NOTES:
            edit_path = notes_path
            try:
                self.io.read_node_file(notes_path)
            except FileNotFoundError:
                try:
                    self.io.create_notes_file(notes_path)
                except Exception as e:
                    raise StepError("creating notes file", e) from e
                notes_created = True
                logger.info(f"Created notes file {notes_path}")
            except Exception as e:
                raise StepError("reading notes file", e) from e
        else:
            edit_path = draft_path
            try:
                self.io.read_node_file(draft_path)
            except Exception as e:
                raise StepError("reading node file", e) from e

        try:
            self.editor.open(editor_spec, edit_path)
        except EditorError:
            if notes_created:
                self._discard_notes(notes_path)
            raise

        PostEditRefresher(self.io, self.clock).refresh(draft_path)
        self.output_handler.info(f"Updated {sanitize_path(draft_path)}")

    def _discard_notes(self, notes_path: str) -> None:
        try:
            self.io.delete_file(notes_path)
        except Exception as e:
            logger.warning(f"Could not remove notes file {notes_path}: {e}")
