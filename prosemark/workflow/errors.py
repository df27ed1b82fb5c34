"""Typed exception hierarchy for node-creation and editing workflows.

Every error raised out of a NodeCreationTransaction carries an ``outcome``
telling the caller whether the project was left untouched, rolled back, or
committed.
"""

from typing import List, Optional, TYPE_CHECKING

from prosemark.errors import ProsemarkError, TransactionOutcome

if TYPE_CHECKING:
    from prosemark.binder.models import Diagnostic

    from .node_creation import NodeCreationResult


class WorkflowError(ProsemarkError):
    """Base exception for all workflow errors.

    Attributes:
        result: The committed run, set on post-commit failures so callers
                can still report its diagnostics
    """

    result: Optional["NodeCreationResult"] = None


class StepError(WorkflowError):
    """Raised when one step of a workflow fails.

    Attributes:
        step: Name of the failed step (e.g. "writing binder")
        cause: Underlying exception
    """

    def __init__(
        self,
        step: str,
        cause: BaseException,
        outcome: Optional[TransactionOutcome] = None,
    ):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause
        if outcome is not None:
            self.outcome = outcome


class DiagnosticError(WorkflowError):
    """Raised when the binder mutation reported error-severity diagnostics.

    Attributes:
        diagnostics: Every diagnostic the mutation produced
    """

    outcome = TransactionOutcome.FAILED_PRE_COMMIT

    def __init__(self, diagnostics: List["Diagnostic"]):
        super().__init__("add has errors")
        self.diagnostics = diagnostics


class RollbackError(WorkflowError):
    """Raised when deleting the node file after a pre-commit failure also failed.

    The node file may remain on disk, unreferenced by the binder.

    Attributes:
        original: The failure that triggered the rollback
        rollback_error: The failure of the delete itself
        diagnostics: Diagnostics carried by original, if any
    """

    outcome = TransactionOutcome.FAILED_PRE_COMMIT

    def __init__(self, original: BaseException, rollback_error: BaseException):
        super().__init__(f"{original}; rollback also failed: {rollback_error}")
        self.original = original
        self.rollback_error = rollback_error
        self.diagnostics = list(getattr(original, 'diagnostics', []))


class EditorError(WorkflowError):
    """Raised when the external editor cannot be launched or exits non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.returncode = returncode


class EditorNotConfiguredError(EditorError):
    """Raised when no editor is configured (empty or whitespace-only)."""

    def __init__(self):
        super().__init__("$EDITOR is not set")
