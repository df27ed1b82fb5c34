"""AddCommand: link a child node into the binder.

Two modes:

- plain: link an existing ``--target`` file under ``--parent``
- ``--new``: create a fresh node file and link it, as one
  NodeCreationTransaction, optionally opening it in the editor afterwards
"""

import logging
import os
from typing import Mapping, Optional

from prosemark.binder.add_child import add_child
from prosemark.binder.models import CODE_CONFLICTING_FLAGS, AddChildParams, has_error
from prosemark.errors import ProsemarkError, TransactionOutcome
from prosemark.file_io import file_exists
from prosemark.node.clock import IDGenerator, SystemClock, TimeSource, UUIDv7Generator
from prosemark.workflow.editor_session import EditorSession
from prosemark.workflow.errors import DiagnosticError, StepError
from prosemark.workflow.node_creation import (
    STEP_READ_BINDER,
    STEP_WRITE_BINDER,
    BinderMutator,
    NodeCreationRequest,
    NodeCreationTransaction,
)
from prosemark.workflow.node_io import FileNodeCreationIO, NodeCreationIO
from .config import CONFIG_FILENAME, ConfigLoader, resolve_binder_path, resolve_editor_spec
from .errors import ConflictingFlagsError, ProjectNotInitializedError, UsageError, exit_code_for
from .models import ExitCode, OpResult
from .output import OutputHandler, sanitize_path

logger = logging.getLogger(__name__)


class AddCommand:
    """Orchestrates the add command.

    Dependencies default to the production implementations and can be
    replaced in tests.

    Example:
        >>> output = OutputHandler()
        >>> exit_code = AddCommand(output_handler=output).run(parent=".", new=True, title="Chapter One")
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        io: Optional[NodeCreationIO] = None,
        mutate: BinderMutator = add_child,
        clock: Optional[TimeSource] = None,
        id_generator: Optional[IDGenerator] = None,
        editor: Optional[EditorSession] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.output_handler = output_handler or OutputHandler()
        self.io = io or FileNodeCreationIO()
        self.mutate = mutate
        self.clock = clock or SystemClock()
        self.id_generator = id_generator or UUIDv7Generator()
        self.editor = editor or EditorSession()
        self.environ = os.environ if environ is None else environ

    def run(
        self,
        parent: str = ".",
        target: str = "",
        title: str = "",
        synopsis: str = "",
        new: bool = False,
        edit: bool = False,
        force: bool = False,
        first: bool = False,
        at: Optional[int] = None,
        before: str = "",
        after: str = "",
        json_mode: bool = False,
        project: Optional[str] = None,
    ) -> ExitCode:
        """Execute the add command and translate failures to exit codes.

        Returns:
            ExitCode for the process
        """
        try:
            params = self._build_params(parent, target, title, force, first, at, before, after)
            if edit and not new:
                raise UsageError("--edit requires --new")
            if not new and not target:
                raise UsageError("--target is required unless --new is given")

            binder_path = resolve_binder_path(project)
            if not file_exists(binder_path):
                raise ProjectNotInitializedError(binder_path)

            if new:
                self._run_new(binder_path, params, synopsis, edit, json_mode)
            else:
                self._run_link(binder_path, params, json_mode)
            return ExitCode.SUCCESS

        except ProsemarkError as e:
            logger.error(f"add failed: {e}")
            self._report_failure_diagnostics(e, json_mode)
            self.output_handler.error(str(e))
            if e.outcome == TransactionOutcome.FAILED_POST_COMMIT:
                self.output_handler.warning("the node was created and added to the binder; its file was kept")
            return exit_code_for(e)

        except Exception as e:
            logger.exception("Unexpected error during add")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _build_params(
        self,
        parent: str,
        target: str,
        title: str,
        force: bool,
        first: bool,
        at: Optional[int],
        before: str,
        after: str,
    ) -> AddChildParams:
        position_flags = sum([first, at is not None, bool(before), bool(after)])
        if position_flags > 1:
            raise ConflictingFlagsError(
                "only one of --first, --at, --before, --after may be specified",
                CODE_CONFLICTING_FLAGS,
            )
        return AddChildParams(
            parent_selector=parent,
            target=target,
            title=title,
            position="first" if first else "last",
            at=at,
            before=before,
            after=after,
            force=force,
        )

    def _run_new(
        self,
        binder_path: str,
        params: AddChildParams,
        synopsis: str,
        edit: bool,
        json_mode: bool,
    ) -> None:
        editor_spec = ""
        if edit:
            config = ConfigLoader.load(os.path.join(os.path.dirname(binder_path), CONFIG_FILENAME))
            editor_spec = resolve_editor_spec(self.environ, config)

        transaction = NodeCreationTransaction(
            io=self.io,
            mutate=self.mutate,
            clock=self.clock,
            id_generator=self.id_generator,
            editor=self.editor,
        )
        result = transaction.run(NodeCreationRequest(
            binder_path=binder_path,
            params=params,
            synopsis=synopsis,
            edit=edit,
            editor_spec=editor_spec,
        ))

        self._report_diagnostics(result.diagnostics, result.changed, json_mode)
        if not json_mode:
            self.output_handler.success(
                f"Created {sanitize_path(result.target)} in {sanitize_path(binder_path)}"
            )

    def _run_link(self, binder_path: str, params: AddChildParams, json_mode: bool) -> None:
        try:
            binder_bytes = self.io.read_binder(binder_path)
        except Exception as e:
            raise StepError(STEP_READ_BINDER, e) from e

        mutation = self.mutate(binder_bytes, params)
        if has_error(mutation.diagnostics):
            raise DiagnosticError(mutation.diagnostics)

        changed = mutation.modified != binder_bytes
        if changed:
            try:
                self.io.write_binder_atomic(binder_path, mutation.modified)
            except Exception as e:
                raise StepError(STEP_WRITE_BINDER, e) from e

        self._report_diagnostics(mutation.diagnostics, changed, json_mode)
        if json_mode:
            return
        target = sanitize_path(params.target)
        if changed:
            self.output_handler.success(f"Added {target} to {sanitize_path(binder_path)}")
        else:
            self.output_handler.print(f"{target} already in {sanitize_path(binder_path)} (skipped)")

    def _report_diagnostics(self, diagnostics, changed: bool, json_mode: bool) -> None:
        if json_mode:
            self.output_handler.print_json(OpResult(changed=changed, diagnostics=diagnostics).to_dict())
        else:
            self.output_handler.print_diagnostics(diagnostics)

    def _report_failure_diagnostics(self, error: ProsemarkError, json_mode: bool) -> None:
        # Post-commit failures carry the committed run; rollbacks carry the
        # diagnostics of the failure that triggered them
        result = getattr(error, 'result', None)
        if result is not None:
            self._report_diagnostics(result.diagnostics, result.changed, json_mode)
        elif getattr(error, 'diagnostics', None):
            self._report_diagnostics(error.diagnostics, False, json_mode)
