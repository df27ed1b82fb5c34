"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError so main.py can map them to exit codes
in one place.
"""

from prosemark.errors import ProsemarkError


class CLIError(ProsemarkError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigError(CLIError):
    """Raised when .prosemark.yml is unreadable or malformed."""

    def __init__(self, config_path: str, message: str):
        super().__init__(f"Invalid configuration in {config_path}: {message}")
        self.config_path = config_path
        self.message = message


class InitError(CLIError):
    """Raised when project initialization fails."""

    def __init__(self, message: str):
        super().__init__(message)


class ProjectNotInitializedError(CLIError):
    """Raised when the project directory has no _binder.md."""

    def __init__(self, binder_path: str):
        super().__init__("project not initialized — run 'pmk init' first")
        self.binder_path = binder_path


class UsageError(CLIError):
    """Raised when command-line arguments are invalid."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictingFlagsError(UsageError):
    """Raised when mutually exclusive flags are combined.

    Attributes:
        code: Diagnostic code of the conflict
    """

    def __init__(self, message: str, code: str):
        super().__init__(f"{message} ({code})")
        self.code = code


class NodeNotFoundError(CLIError):
    """Raised when a node ID is not referenced by the binder."""

    def __init__(self, node_id: str):
        super().__init__(f"node {node_id!r} not found in binder")
        self.node_id = node_id


def exit_code_for(error: Exception) -> int:
    """Map an exception to the ExitCode the CLI should end with."""
    # Imported here; the workflow and node packages import nothing from the CLI
    from prosemark.cli.models import ExitCode
    from prosemark.node.errors import InputValidationError
    from prosemark.workflow.errors import DiagnosticError, EditorError

    if isinstance(error, (InputValidationError, UsageError)):
        return ExitCode.VALIDATION_ERROR
    if isinstance(error, DiagnosticError):
        return ExitCode.DIAGNOSTIC_ERROR
    if isinstance(error, EditorError):
        return ExitCode.EDITOR_ERROR
    return ExitCode.GENERAL_ERROR
