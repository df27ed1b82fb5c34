"""Data models for CLI operations.

All models use dataclasses (or enums), following the patterns established
in prosemark/binder/models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List

from prosemark.binder.models import BinderNode, Diagnostic


class ExitCode(IntEnum):
    """Exit codes for pmk commands.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): I/O failures, rollback failures, uninitialized project
    - VALIDATION_ERROR (2): Invalid input or conflicting flags; nothing was touched
    - DIAGNOSTIC_ERROR (3): The binder mutation reported error diagnostics
    - EDITOR_ERROR (4): The editor is not configured, failed to start, or failed

    Example:
        >>> raise typer.Exit(ExitCode.VALIDATION_ERROR)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    DIAGNOSTIC_ERROR = 3
    EDITOR_ERROR = 4


@dataclass
class OpResult:
    """JSON result of a binder operation (``--json``).

    Attributes:
        changed: True if the binder was rewritten
        diagnostics: Diagnostics of the operation
        version: Output schema version
    """
    changed: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)
    version: str = "1"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'changed': self.changed,
            'diagnostics': [d.to_dict() for d in self.diagnostics],
        }


@dataclass
class ParseOutput:
    """JSON result of ``pmk parse --json``."""
    root: BinderNode
    diagnostics: List[Diagnostic] = field(default_factory=list)
    version: str = "1"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'root': self.root.to_dict(),
            'diagnostics': [d.to_dict() for d in self.diagnostics],
        }
