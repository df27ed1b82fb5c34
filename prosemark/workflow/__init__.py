"""Node workflows: the node-creation transaction, editor sessions and
post-edit refresh, together with the filesystem capability they run on.
"""

from .editor_session import EditorSession, is_editor_configured
from .errors import (
    DiagnosticError,
    EditorError,
    EditorNotConfiguredError,
    RollbackError,
    StepError,
    WorkflowError,
)
from .node_creation import (
    BinderMutator,
    NodeCreationRequest,
    NodeCreationResult,
    NodeCreationTransaction,
)
from .node_io import EditIO, FileNodeCreationIO, NodeCreationIO
from .post_edit_refresher import PostEditRefresher

__all__ = [
    'EditorSession',
    'is_editor_configured',
    'DiagnosticError',
    'EditorError',
    'EditorNotConfiguredError',
    'RollbackError',
    'StepError',
    'WorkflowError',
    'BinderMutator',
    'NodeCreationRequest',
    'NodeCreationResult',
    'NodeCreationTransaction',
    'EditIO',
    'FileNodeCreationIO',
    'NodeCreationIO',
    'PostEditRefresher',
]
