"""Command-line interface for prosemark projects.

This package provides the `pmk` CLI tool: `pmk init` creates a project,
`pmk add` links (or creates) nodes in the binder, `pmk edit` opens a
node in the user's editor, and `pmk parse` prints the binder outline.
"""

from .add_command import AddCommand
from .edit_command import EditCommand
from .init_command import InitCommand, InitResult
from .models import ExitCode, OpResult, ParseOutput
from .parse_command import ParseCommand
from .config import ConfigLoader, ProjectConfig
from .errors import (
    CLIError,
    ConfigError,
    ConflictingFlagsError,
    InitError,
    NodeNotFoundError,
    ProjectNotInitializedError,
    UsageError,
)

__all__ = [
    'AddCommand',
    'EditCommand',
    'InitCommand',
    'InitResult',
    'ExitCode',
    'OpResult',
    'ParseOutput',
    'ParseCommand',
    'ConfigLoader',
    'ProjectConfig',
    'CLIError',
    'ConfigError',
    'ConflictingFlagsError',
    'InitError',
    'NodeNotFoundError',
    'ProjectNotInitializedError',
    'UsageError',
]
