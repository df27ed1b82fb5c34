"""Data models for the binder outline and its mutation results.

All models use dataclasses, following the patterns of the node package.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Diagnostic severities
SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

# Parse/lint errors
CODE_ILLEGAL_PATH_CHARS = "BNDE001"
CODE_PATH_ESCAPES_ROOT = "BNDE002"

# Parse/lint warnings
CODE_MISSING_PRAGMA = "BNDW001"
CODE_DUPLICATE_FILE_REF = "BNDW003"
CODE_LINK_IN_CODE_FENCE = "BNDW005"
CODE_SELF_REFERENTIAL_LINK = "BNDW008"
CODE_BOM_PRESENCE = "BNDW010"

# Operation errors (abort the mutation)
CODE_SELECTOR_NO_MATCH = "OPE001"
CODE_INVALID_TARGET_PATH = "OPE004"
CODE_TARGET_IS_BINDER = "OPE005"
CODE_SIBLING_NOT_FOUND = "OPE007"
CODE_INDEX_OUT_OF_BOUNDS = "OPE008"
CODE_IO_OR_PARSE_FAILURE = "OPE009"
CODE_CONFLICTING_FLAGS = "OPE010"
CODE_INVALID_TITLE = "OPE011"

# Operation warnings (mutation proceeds)
CODE_MULTI_MATCH = "OPW001"
CODE_DUPLICATE_SKIPPED = "OPW002"


@dataclass
class Diagnostic:
    """A structured error or warning emitted while parsing or mutating a binder.

    Attributes:
        severity: "error" or "warning"; the only signal for commit vs. rollback
        code: Stable identifier such as "OPE001" or "OPW002"
        message: Human-readable description
        line: 1-based source line, when known
    """
    severity: str
    code: str
    message: str
    line: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.severity == SEVERITY_ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: {"severity", "code", "message"} plus "line" when known."""
        data: Dict[str, Any] = {
            'severity': self.severity,
            'code': self.code,
            'message': self.message,
        }
        if self.line is not None:
            data['line'] = self.line
        return data


@dataclass
class BinderNode:
    """A node of the binder tree.

    The root has node_type "root" and no target. Source metadata (line,
    indent, list_marker, raw_line) lets mutations splice new lines into the
    original text without reformatting it.
    """
    node_type: str = "node"
    target: str = ""
    title: str = ""
    children: List['BinderNode'] = field(default_factory=list)
    line: int = 0
    indent: int = 0
    list_marker: str = ""
    raw_line: str = ""

    @property
    def is_root(self) -> bool:
        return self.node_type == "root"

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: {"type", "target", "title", "children"}.

        Empty target and title (always the case for the root) are omitted.
        """
        data: Dict[str, Any] = {'type': self.node_type}
        if self.target:
            data['target'] = self.target
        if self.title:
            data['title'] = self.title
        data['children'] = [child.to_dict() for child in self.children]
        return data


@dataclass
class ParseResult:
    """Parsed binder: the node tree plus everything needed to rebuild the bytes.

    Attributes:
        root: Root node of the outline
        lines: Source lines without line endings
        line_ends: Line ending of each line ("\\n", "\\r\\n", "\\r" or "")
        has_bom: True if the source started with a UTF-8 BOM
        has_pragma: True if the prosemark-binder pragma was found
    """
    root: BinderNode = field(default_factory=lambda: BinderNode(node_type="root"))
    lines: List[str] = field(default_factory=list)
    line_ends: List[str] = field(default_factory=list)
    has_bom: bool = False
    has_pragma: bool = False


@dataclass
class AddChildParams:
    """Parameters of the add-child mutation.

    Attributes:
        parent_selector: Selector of the parent node ("." is the root)
        target: Relative path of the child file
        title: Display title ("" derives it from the target stem)
        position: "last" or "first"
        at: Zero-based insertion index (overrides position)
        before: Selector of the sibling to insert before
        after: Selector of the sibling to insert after
        force: Allow a duplicate target under the same parent
    """
    parent_selector: str = "."
    target: str = ""
    title: str = ""
    position: str = "last"
    at: Optional[int] = None
    before: str = ""
    after: str = ""
    force: bool = False


@dataclass
class MutationResult:
    """Outcome of a binder mutation.

    Attributes:
        modified: New binder bytes (equal to the input when nothing changed)
        diagnostics: Parse and operation diagnostics
        changed: True when modified differs from the original bytes
    """
    modified: bytes
    diagnostics: List[Diagnostic] = field(default_factory=list)
    changed: bool = False


def has_error(diagnostics: List[Diagnostic]) -> bool:
    """Report whether any diagnostic has error severity."""
    return any(d.is_error for d in diagnostics)
