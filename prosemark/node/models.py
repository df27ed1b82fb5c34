"""Data models for node files."""

from dataclasses import dataclass
from enum import Enum


@dataclass
class Frontmatter:
    """YAML frontmatter of a node file.

    Attributes:
        id: Node identifier (UUIDv7 string); never changes once written
        created: RFC 3339 UTC timestamp of creation; set once
        updated: RFC 3339 UTC timestamp of the last modification
        title: Optional display title ("" when absent)
        synopsis: Optional short summary ("" when absent)
    """
    id: str
    created: str
    updated: str
    title: str = ""
    synopsis: str = ""


class NodePart(str, Enum):
    """Which file of a node is addressed: the draft or its notes companion."""
    DRAFT = "draft"
    NOTES = "notes"
