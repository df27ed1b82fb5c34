"""Node-creation transaction: new node file plus binder link, all or nothing.

The node file is written first and the binder second. The binder write is
the commit point:

- before it, any failure deletes the node file again (a single attempt)
- after it, node and binder are kept whatever happens, and editor or
  refresh failures are reported as post-commit failures

so the binder never references a missing file, and a failed run never
leaves an orphan node behind unless the rollback itself failed.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, NoReturn, Optional

from prosemark.binder.models import AddChildParams, Diagnostic, MutationResult, has_error
from prosemark.errors import ProsemarkError, TransactionOutcome
from prosemark.node.clock import IDGenerator, TimeSource
from prosemark.node.errors import GenerationError
from prosemark.node.frontmatter_handler import FrontmatterHandler
from prosemark.node.models import Frontmatter
from prosemark.node.validation import validate_new_node_input

from .editor_session import EditorSession
from .errors import DiagnosticError, EditorError, RollbackError, StepError, WorkflowError
from .node_io import NodeCreationIO
from .post_edit_refresher import PostEditRefresher

logger = logging.getLogger(__name__)

# Binder mutation engine: (binder bytes, params) -> MutationResult
BinderMutator = Callable[[bytes, AddChildParams], MutationResult]

STEP_READ_BINDER = "reading binder"
STEP_CREATE_NODE = "creating node file"
STEP_MUTATE_BINDER = "mutating binder"
STEP_WRITE_BINDER = "writing binder"


@dataclass
class NodeCreationRequest:
    """Everything one `add --new` run needs.

    Attributes:
        binder_path: Path of _binder.md; the node file is created beside it
        params: Binder mutation parameters; an empty target is generated
        synopsis: Synopsis frontmatter field
        edit: Open the new node in the editor after commit
        editor_spec: Raw editor setting (only used when edit is True)
    """
    binder_path: str
    params: AddChildParams
    synopsis: str = ""
    edit: bool = False
    editor_spec: str = ""


@dataclass
class NodeCreationResult:
    """Outcome of a committed node-creation run.

    Attributes:
        target: Node filename as linked in the binder
        node_path: Filesystem path of the node file
        diagnostics: Warning diagnostics of the binder mutation
        changed: True if the binder was rewritten
        outcome: Always COMMITTED for a returned result
    """
    target: str
    node_path: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    changed: bool = False
    outcome: TransactionOutcome = TransactionOutcome.COMMITTED


class NodeCreationTransaction:
    """Creates a node file and links it into the binder.

    All collaborators are passed in explicitly so every step can be
    exercised with fakes.

    Example:
        >>> txn = NodeCreationTransaction(
        ...     io=FileNodeCreationIO(),
        ...     mutate=add_child,
        ...     clock=SystemClock(),
        ...     id_generator=UUIDv7Generator(),
        ... )
        >>> result = txn.run(NodeCreationRequest(binder_path, params, synopsis="Opening"))
    """

    def __init__(
        self,
        io: NodeCreationIO,
        mutate: BinderMutator,
        clock: TimeSource,
        id_generator: IDGenerator,
        editor: Optional[EditorSession] = None,
        refresher: Optional[PostEditRefresher] = None,
    ):
        self.io = io
        self.mutate = mutate
        self.clock = clock
        self.id_generator = id_generator
        self.editor = editor or EditorSession()
        self.refresher = refresher or PostEditRefresher(io, clock)

    def run(self, request: NodeCreationRequest) -> NodeCreationResult:
        """Run the transaction.

        Args:
            request: Creation request

        Returns:
            NodeCreationResult for a committed run

        Raises:
            InputValidationError: Invalid input, nothing was touched
            GenerationError: No ID could be generated, nothing was touched
            StepError: A step failed; see its outcome
            DiagnosticError: The mutation reported errors, node rolled back
            RollbackError: A pre-commit failure whose rollback also failed
            EditorError: Editor failed after commit, node and binder kept
        """
        params = request.params
        validate_new_node_input(params.target, params.title, request.synopsis)

        target = params.target or self._generate_target()
        params = dataclasses.replace(params, target=target)
        node_path = os.path.join(os.path.dirname(request.binder_path), target)

        try:
            binder_bytes = self.io.read_binder(request.binder_path)
        except Exception as e:
            raise StepError(STEP_READ_BINDER, e, TransactionOutcome.FAILED_PRE_COMMIT) from e

        self._write_node(node_path, target, params.title, request.synopsis)

        try:
            mutation = self.mutate(binder_bytes, params)
        except Exception as e:
            self._rollback(node_path, StepError(STEP_MUTATE_BINDER, e, TransactionOutcome.FAILED_PRE_COMMIT))

        if has_error(mutation.diagnostics):
            self._rollback(node_path, DiagnosticError(mutation.diagnostics))

        changed = mutation.modified != binder_bytes
        if changed:
            try:
                self.io.write_binder_atomic(request.binder_path, mutation.modified)
            except Exception as e:
                self._rollback(node_path, StepError(STEP_WRITE_BINDER, e, TransactionOutcome.FAILED_PRE_COMMIT))
        else:
            logger.info(f"Binder already references {target}; binder left untouched")

        logger.info(f"Committed {target} in {request.binder_path}")

        result = NodeCreationResult(
            target=target,
            node_path=node_path,
            diagnostics=mutation.diagnostics,
            changed=changed,
        )
        if request.edit:
            self._edit(request.editor_spec, result)
        return result

    def _generate_target(self) -> str:
        try:
            node_id = self.id_generator.new_id()
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(str(e)) from e
        return node_id + ".md"

    def _write_node(self, node_path: str, target: str, title: str, synopsis: str) -> None:
        try:
            if self.io.node_exists(node_path):
                raise FileExistsError(f"node file already exists: {node_path}")
            now = self.clock.now()
            fm = Frontmatter(
                id=target[:-len('.md')],
                title=title,
                synopsis=synopsis,
                created=now,
                updated=now,
            )
            self.io.write_node_atomic(node_path, FrontmatterHandler.serialize(fm))
        except Exception as e:
            raise StepError(STEP_CREATE_NODE, e, TransactionOutcome.FAILED_PRE_COMMIT) from e
        logger.debug(f"Created node file {node_path}")

    def _rollback(self, node_path: str, error: ProsemarkError) -> NoReturn:
        """Delete the node file once and re-raise error (or a RollbackError)."""
        logger.warning(f"Rolling back {node_path}: {error}")
        try:
            self.io.delete_file(node_path)
        except Exception as rollback_error:
            logger.error(f"Rollback of {node_path} failed: {rollback_error}")
            raise RollbackError(error, rollback_error) from error
        error.outcome = TransactionOutcome.FAILED_PRE_COMMIT
        raise error

    def _edit(self, editor_spec: str, result: NodeCreationResult) -> None:
        try:
            self.editor.open(editor_spec, result.node_path)
            self.refresher.refresh(result.node_path)
        except WorkflowError as e:
            self._mark_post_commit(e, result)
            raise
        except Exception as e:
            error = EditorError(f"editing {result.node_path}: {e}")
            self._mark_post_commit(error, result)
            raise error from e

    def _mark_post_commit(self, error: WorkflowError, result: NodeCreationResult) -> None:
        error.outcome = TransactionOutcome.FAILED_POST_COMMIT
        error.result = result
        logger.error(f"Node {result.node_path} was created but editing failed: {error}")
