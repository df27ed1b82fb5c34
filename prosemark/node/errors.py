"""Typed exception hierarchy for node files and node input."""

from prosemark.errors import ProsemarkError, TransactionOutcome


class NodeError(ProsemarkError):
    """Base exception for all node errors."""
    pass


class FrontmatterError(NodeError):
    """Raised when a node file's YAML frontmatter is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(NodeError):
    """Raised when user-supplied node input is invalid.

    Raised before any I/O, so re-running with corrected input is always safe.
    """

    outcome = TransactionOutcome.REJECTED

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class GenerationError(NodeError):
    """Raised when a new node ID cannot be generated."""

    outcome = TransactionOutcome.FAILED_PRE_COMMIT

    def __init__(self, reason: str):
        super().__init__(f"generating node ID: {reason}")
        self.reason = reason
