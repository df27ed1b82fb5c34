"""Binder outline parsing and mutation.

The binder (``_binder.md``) is the project's table of contents: a markdown
list of links to node files. Parsing preserves every source byte so that
mutations only ever splice new lines in.
"""

from .add_child import add_child
from .errors import BinderError, BinderParseError
from .models import (
    AddChildParams,
    BinderNode,
    Diagnostic,
    MutationResult,
    ParseResult,
    has_error,
)
from .parser import (
    BINDER_FILENAME,
    BINDER_PRAGMA,
    find_target,
    parse_binder,
    serialize_binder,
)
from .selector import select_parents

__all__ = [
    'add_child',
    'BinderError',
    'BinderParseError',
    'AddChildParams',
    'BinderNode',
    'Diagnostic',
    'MutationResult',
    'ParseResult',
    'has_error',
    'BINDER_FILENAME',
    'BINDER_PRAGMA',
    'find_target',
    'parse_binder',
    'serialize_binder',
    'select_parents',
]
