"""Selector evaluation for binder nodes.

Selectors address nodes in the outline:

- "." is the root
- "part-one:chapter-2" walks children segment by segment; a segment may end
  with "[N]" to pick the Nth match
- anything else searches the whole tree by bare stem, target path, or
  case-insensitive title
"""

import re
from typing import List, Tuple

from .models import (
    CODE_MULTI_MATCH,
    CODE_SELECTOR_NO_MATCH,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    BinderNode,
    Diagnostic,
)
from .parser import stem_from_path


SEGMENT_INDEX_PATTERN = re.compile(r'^(.*)\[(\d+)\]$')


def node_matches(selector: str, node: BinderNode) -> bool:
    """Report whether node is addressed by a single selector segment."""
    if '/' in selector:
        return node.target == selector or node.target == selector + '.md'
    return (
        stem_from_path(node.target) == selector
        or node.target == selector
        or node.title.lower() == selector.lower()
    )


def _search_tree(node: BinderNode, selector: str, matches: List[BinderNode]) -> None:
    for child in node.children:
        if node_matches(selector, child):
            matches.append(child)
        _search_tree(child, selector, matches)


def _walk_path(selector: str, root: BinderNode) -> Tuple[List[BinderNode], List[Diagnostic]]:
    current = [root]
    for segment in selector.split(':'):
        if segment == '.':
            continue
        index = -1
        indexed = SEGMENT_INDEX_PATTERN.match(segment)
        if indexed:
            segment, index = indexed.group(1), int(indexed.group(2))

        matches = [child for node in current for child in node.children if node_matches(segment, child)]
        if index >= 0:
            matches = matches[index:index + 1]
        if not matches:
            return [], [Diagnostic(
                SEVERITY_ERROR, CODE_SELECTOR_NO_MATCH, f"selector {selector!r} matched no nodes",
            )]
        current = matches
    return current, []


def select_parents(selector: str, root: BinderNode) -> Tuple[List[BinderNode], List[Diagnostic]]:
    """Evaluate a parent selector.

    Args:
        selector: Selector expression
        root: Root of the binder tree

    Returns:
        Tuple of (matched nodes, diagnostics). No match yields an OPE001
        error; several matches yield an OPW001 warning and all are returned.
    """
    if selector in ('', '.'):
        return [root], []

    if ':' in selector or '[' in selector:
        matches, diagnostics = _walk_path(selector, root)
    else:
        matches = []
        _search_tree(root, selector, matches)
        diagnostics = []
        if not matches:
            diagnostics.append(Diagnostic(
                SEVERITY_ERROR, CODE_SELECTOR_NO_MATCH, f"selector {selector!r} matched no nodes",
            ))

    if len(matches) > 1:
        diagnostics.append(Diagnostic(
            SEVERITY_WARNING, CODE_MULTI_MATCH,
            f"selector {selector!r} matched {len(matches)} nodes; operation applied to all matches",
        ))
    return matches, diagnostics
