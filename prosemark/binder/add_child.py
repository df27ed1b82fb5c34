"""The add-child binder mutation.

add_child() is a pure function: it takes binder bytes and parameters and
returns new bytes plus diagnostics. It never touches the filesystem. On any
error diagnostic the returned bytes equal the input.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import unquote

from .errors import BinderParseError
from .models import (
    CODE_DUPLICATE_SKIPPED,
    CODE_INDEX_OUT_OF_BOUNDS,
    CODE_INVALID_TITLE,
    CODE_INVALID_TARGET_PATH,
    CODE_IO_OR_PARSE_FAILURE,
    CODE_SIBLING_NOT_FOUND,
    CODE_TARGET_IS_BINDER,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    AddChildParams,
    BinderNode,
    Diagnostic,
    MutationResult,
    ParseResult,
)
from .parser import (
    BINDER_FILENAME,
    escapes_root,
    parse_binder,
    serialize_binder,
    stem_from_path,
)
from .selector import select_parents


logger = logging.getLogger(__name__)

# Characters never allowed in a new child target
TARGET_ILLEGAL_CHARS = frozenset('<>"|?*')

# Any of these would split the new link across lines
TITLE_LINE_BREAKS = frozenset('\n\r\x0b\x0c\x85\u2028\u2029')


def add_child(src: bytes, params: AddChildParams) -> MutationResult:
    """Insert a child link under the node(s) selected by params.parent_selector.

    Args:
        src: Current binder bytes
        params: Mutation parameters

    Returns:
        MutationResult with the new bytes, diagnostics and changed flag
    """
    try:
        result, diagnostics = parse_binder(src)
    except BinderParseError as e:
        return MutationResult(
            modified=src,
            diagnostics=[Diagnostic(SEVERITY_ERROR, CODE_IO_OR_PARSE_FAILURE, f"parse error: {e}")],
        )

    target_diag = validate_target(params.target)
    if target_diag is not None:
        return MutationResult(modified=src, diagnostics=diagnostics + [target_diag])

    target = unquote(params.target)
    raw_title = params.title or stem_from_path(target)
    if any(ch in TITLE_LINE_BREAKS for ch in raw_title):
        return MutationResult(modified=src, diagnostics=diagnostics + [Diagnostic(
            SEVERITY_ERROR, CODE_INVALID_TITLE, "title must not contain line breaks",
        )])

    parents, selector_diags = select_parents(params.parent_selector, result.root)
    diagnostics.extend(selector_diags)
    if not parents:
        return MutationResult(modified=src, diagnostics=diagnostics)

    title = escape_title(raw_title)
    line_end = majority_line_ending(result.line_ends)

    # Plan against the unmodified line numbers, then splice
    planned = []
    for parent in parents:
        if not params.force and any(c.target in (target, params.target) for c in parent.children):
            diagnostics.append(Diagnostic(
                SEVERITY_WARNING, CODE_DUPLICATE_SKIPPED,
                f"target {params.target!r} already exists as a child; skipping (use --force to override)",
            ))
            continue

        insert_idx, position_diag = resolve_insertion_index(parent, params)
        if position_diag is not None:
            return MutationResult(modified=src, diagnostics=diagnostics + [position_diag])

        indent, marker = infer_marker_and_indent(parent, insert_idx)
        planned.append((insertion_line_index(parent, insert_idx, result), parent, f"{indent}{marker} [{title}]({target})"))

    # Bottom-up; at a shared index the outer parent goes in first so the
    # nested parent's child ends up directly beneath it
    for line_idx, parent, new_line in sorted(planned, key=lambda p: (-p[0], p[1].line)):
        if parent.is_root and not parent.children:
            result.lines.insert(line_idx, "")
            result.line_ends.insert(line_idx, line_end)
            line_idx += 1
            _terminate_previous_line(result, line_idx - 1, line_end)
        else:
            _terminate_previous_line(result, line_idx, line_end)

        result.lines.insert(line_idx, new_line)
        result.line_ends.insert(line_idx, line_end)

    modified = serialize_binder(result)
    changed = modified != src
    if changed:
        logger.debug(f"Added {target} under {len(parents)} parent(s)")
    return MutationResult(modified=modified, diagnostics=diagnostics, changed=changed)


def _terminate_previous_line(result: ParseResult, line_idx: int, line_end: str) -> None:
    # A file without a trailing newline needs one before text is appended after it
    if 0 < line_idx <= len(result.line_ends) and result.line_ends[line_idx - 1] == "":
        result.line_ends[line_idx - 1] = line_end


def validate_target(target: str) -> Optional[Diagnostic]:
    """Check a new child target path (OPE004, OPE005)."""
    if escapes_root(target):
        return Diagnostic(SEVERITY_ERROR, CODE_INVALID_TARGET_PATH, "target path escapes the project root")
    if any(ord(c) < 0x20 or c in TARGET_ILLEGAL_CHARS for c in target):
        return Diagnostic(
            SEVERITY_ERROR, CODE_INVALID_TARGET_PATH, f"target {target!r} contains illegal path characters",
        )
    if not target.endswith('.md'):
        return Diagnostic(SEVERITY_ERROR, CODE_INVALID_TARGET_PATH, f"target {target!r} must have a .md extension")
    if target == BINDER_FILENAME:
        return Diagnostic(SEVERITY_ERROR, CODE_TARGET_IS_BINDER, "target is the binder file itself")
    return None


def _sibling_index(children: List[BinderNode], selector: str) -> int:
    for i, child in enumerate(children):
        if stem_from_path(child.target) == selector or child.target in (selector, selector + '.md'):
            return i
    return -1


def resolve_insertion_index(parent: BinderNode, params: AddChildParams) -> Tuple[int, Optional[Diagnostic]]:
    """Zero-based index among parent's children where the new child goes."""
    count = len(parent.children)

    if params.at is not None:
        if params.at < 0 or params.at > count:
            return 0, Diagnostic(
                SEVERITY_ERROR, CODE_INDEX_OUT_OF_BOUNDS,
                f"at index {params.at} out of bounds: {count} children",
            )
        return params.at, None

    for selector, offset, label in ((params.before, 0, 'before'), (params.after, 1, 'after')):
        if selector:
            i = _sibling_index(parent.children, selector)
            if i < 0:
                return 0, Diagnostic(
                    SEVERITY_ERROR, CODE_SIBLING_NOT_FOUND, f"{label}-sibling {selector!r} not found",
                )
            return i + offset, None

    if params.position == 'first':
        return 0, None
    return count, None


def _is_ordered(marker: str) -> bool:
    return len(marker) >= 2 and marker[-1] in '.)' and marker[:-1].isdigit()


def _ordinal(marker: str) -> int:
    return int(marker[:-1]) if _is_ordered(marker) else 0


def _raw_indent(node: BinderNode) -> str:
    return node.raw_line[:node.indent]


def infer_marker_and_indent(parent: BinderNode, insert_idx: int) -> Tuple[str, str]:
    """Indentation and list marker for a new child, copied from its siblings.

    Ordered markers continue from the preceding sibling; at index 0 they
    continue from the highest ordinal among the children.
    """
    if parent.children:
        sibling = parent.children[0]
        marker = sibling.list_marker
        if _is_ordered(marker):
            style = marker[-1]
            if insert_idx > 0:
                marker = f"{_ordinal(parent.children[insert_idx - 1].list_marker) + 1}{style}"
            else:
                marker = f"{max(_ordinal(c.list_marker) for c in parent.children) + 1}{style}"
        return _raw_indent(sibling), marker

    if parent.is_root:
        return "", "-"

    parent_indent = _raw_indent(parent)
    if parent_indent.startswith('\t'):
        return parent_indent + '\t', "-"
    return parent_indent + "  ", "-"


def _subtree_last_line(node: BinderNode) -> int:
    return max([node.line] + [_subtree_last_line(c) for c in node.children])


def insertion_line_index(parent: BinderNode, insert_idx: int, result: ParseResult) -> int:
    """Zero-based position in result.lines at which the new line is inserted."""
    if insert_idx < len(parent.children):
        return parent.children[insert_idx].line - 1
    if not parent.children:
        if parent.is_root:
            return len(result.lines)
        return parent.line
    return _subtree_last_line(parent.children[-1])


def majority_line_ending(ends: List[str]) -> str:
    """Most common line ending, defaulting to "\\n"."""
    crlf = ends.count('\r\n')
    lf = ends.count('\n')
    return '\r\n' if crlf > lf else '\n'


def escape_title(title: str) -> str:
    """Backslash-escape square brackets in a link title."""
    return title.replace('[', '\\[').replace(']', '\\]')
