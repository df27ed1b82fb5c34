"""Binder outline parsing.

The binder is a markdown file whose list items link to node files:

    <!-- prosemark-binder:v1 -->

    - [Part One](part-one.md)
      - [Chapter 1](0192f0c1-2345-7abc-8def-0123456789ab.md)

Only list items whose content starts with an inline link become nodes;
nesting follows indentation. Everything else (prose, headings, code fences)
is kept verbatim in the line list so that serialize() reproduces the input
byte for byte.
"""

import logging
import re
from typing import List, Tuple
from urllib.parse import unquote

from .errors import BinderParseError
from .models import (
    CODE_BOM_PRESENCE,
    CODE_DUPLICATE_FILE_REF,
    CODE_ILLEGAL_PATH_CHARS,
    CODE_LINK_IN_CODE_FENCE,
    CODE_MISSING_PRAGMA,
    CODE_PATH_ESCAPES_ROOT,
    CODE_SELF_REFERENTIAL_LINK,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    BinderNode,
    Diagnostic,
    ParseResult,
)


logger = logging.getLogger(__name__)

BINDER_FILENAME = "_binder.md"
BINDER_PRAGMA = "<!-- prosemark-binder:v1 -->"

UTF8_BOM = b'\xef\xbb\xbf'

PRAGMA_PATTERN = re.compile(r'<!--\s*prosemark-binder:v1\s*-->')
LIST_ITEM_PATTERN = re.compile(r'^(\s*)([-*+]|\d+[.)])\s+(.+)')
INLINE_LINK_PATTERN = re.compile(r'^\[((?:\\.|[^\]\\])*)\]\(([^)\s"]+)(?:\s+"[^"]*")?\s*\)')
ANY_LINK_PATTERN = re.compile(r'\[[^\]]*\]\([^)]*\)')
CHECKBOX_PATTERN = re.compile(r'^\[[xX ]\]\s+')

ILLEGAL_PATH_CHARS = frozenset('<>|?*:')


def stem_from_path(path: str) -> str:
    """Filename stem: basename without its last extension."""
    name = path.rsplit('/', 1)[-1]
    if '.' in name:
        name = name[:name.rindex('.')]
    return name


def has_illegal_path_chars(path: str) -> bool:
    return any(ord(c) < 0x20 or c in ILLEGAL_PATH_CHARS for c in path)


def escapes_root(path: str) -> bool:
    return path == '..' or path.startswith('../')


def open_fence_marker(line: str) -> str:
    for marker in ('```', '~~~'):
        if line.startswith(marker):
            return marker
    return ""


def split_lines(text: str) -> Tuple[List[str], List[str]]:
    """Split text into lines and their endings; a trailing newline adds no empty line."""
    lines: List[str] = []
    ends: List[str] = []
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == '\n':
            lines.append(text[start:i])
            ends.append('\n')
            i += 1
            start = i
        elif ch == '\r':
            end = '\r\n' if text[i + 1:i + 2] == '\n' else '\r'
            lines.append(text[start:i])
            ends.append(end)
            i += len(end)
            start = i
        else:
            i += 1
    if start < len(text):
        lines.append(text[start:])
        ends.append('')
    return lines, ends


def parse_binder(src: bytes) -> Tuple[ParseResult, List[Diagnostic]]:
    """Parse binder bytes into a node tree.

    Args:
        src: Raw binder content

    Returns:
        Tuple of (ParseResult, diagnostics)

    Raises:
        BinderParseError: If the content is not valid UTF-8
    """
    result = ParseResult()
    diagnostics: List[Diagnostic] = []

    if src.startswith(UTF8_BOM):
        result.has_bom = True
        src = src[len(UTF8_BOM):]
        diagnostics.append(Diagnostic(SEVERITY_WARNING, CODE_BOM_PRESENCE, "UTF-8 BOM detected"))

    try:
        text = src.decode('utf-8')
    except UnicodeDecodeError as e:
        raise BinderParseError(f"binder file contains invalid UTF-8 content: {e}")

    result.lines, result.line_ends = split_lines(text)

    # (indent, node) pairs from the root down to the most recent item
    stack: List[Tuple[int, BinderNode]] = [(-1, result.root)]
    seen_targets = set()
    fence = ""

    for index, line in enumerate(result.lines):
        line_num = index + 1

        if fence:
            if line.startswith(fence):
                fence = ""
            elif ANY_LINK_PATTERN.search(line):
                diagnostics.append(Diagnostic(
                    SEVERITY_WARNING, CODE_LINK_IN_CODE_FENCE,
                    "Structural link found inside a fenced code block", line_num,
                ))
            continue

        fence = open_fence_marker(line)
        if fence:
            continue

        if not result.has_pragma and PRAGMA_PATTERN.search(line):
            result.has_pragma = True

        match = LIST_ITEM_PATTERN.match(line)
        if not match:
            continue

        indent = len(match.group(1))
        content = CHECKBOX_PATTERN.sub('', match.group(3).strip())
        link = INLINE_LINK_PATTERN.match(content)
        if not link:
            continue

        title = link.group(1).replace('\\[', '[').replace('\\]', ']')
        target = unquote(link.group(2))

        if has_illegal_path_chars(target):
            diagnostics.append(Diagnostic(
                SEVERITY_ERROR, CODE_ILLEGAL_PATH_CHARS,
                f"Illegal path characters in link target: {target}", line_num,
            ))
            continue
        if escapes_root(target):
            diagnostics.append(Diagnostic(
                SEVERITY_ERROR, CODE_PATH_ESCAPES_ROOT,
                "Link target resolves outside the project root", line_num,
            ))
            continue
        if target == BINDER_FILENAME:
            diagnostics.append(Diagnostic(
                SEVERITY_WARNING, CODE_SELF_REFERENTIAL_LINK,
                "link targets the binder file itself", line_num,
            ))
            continue

        if target in seen_targets:
            diagnostics.append(Diagnostic(
                SEVERITY_WARNING, CODE_DUPLICATE_FILE_REF,
                f"Duplicate file reference: {target} appears as more than one node in the binder tree",
                line_num,
            ))
        seen_targets.add(target)

        node = BinderNode(
            target=target,
            title=title or stem_from_path(target),
            line=line_num,
            indent=indent,
            list_marker=match.group(2),
            raw_line=line,
        )

        while len(stack) > 1 and stack[-1][0] >= indent:
            stack.pop()
        stack[-1][1].children.append(node)
        stack.append((indent, node))

    if not result.has_pragma and result.lines:
        diagnostics.append(Diagnostic(
            SEVERITY_WARNING, CODE_MISSING_PRAGMA,
            f"Missing binder pragma: file has content but does not begin with {BINDER_PRAGMA}",
        ))

    logger.debug(f"Parsed binder: {len(result.lines)} line(s), {len(seen_targets)} target(s)")
    return result, diagnostics


def serialize_binder(result: ParseResult) -> bytes:
    """Rebuild binder bytes from a ParseResult (byte-identical for unmodified input)."""
    text = ''.join(line + end for line, end in zip(result.lines, result.line_ends))
    data = text.encode('utf-8')
    if result.has_bom:
        data = UTF8_BOM + data
    return data


def find_target(node: BinderNode, target: str) -> bool:
    """Report whether target is referenced anywhere in the subtree of node."""
    if node.target == target:
        return True
    return any(find_target(child, target) for child in node.children)
