"""Node files: frontmatter codec, field validation, clock and ID sources.

A node is one content unit of a prosemark project: a markdown file whose
YAML frontmatter carries id, title, synopsis, created and updated, followed
by free-form prose.
"""

from .clock import IDGenerator, SystemClock, TimeSource, UUIDv7Generator, now_utc
from .errors import FrontmatterError, GenerationError, InputValidationError, NodeError
from .frontmatter_handler import FrontmatterHandler
from .models import Frontmatter, NodePart
from .validation import (
    MAX_SYNOPSIS_LENGTH,
    MAX_TITLE_LENGTH,
    is_uuid_filename,
    validate_new_node_input,
    validate_text_field,
)

__all__ = [
    'IDGenerator',
    'SystemClock',
    'TimeSource',
    'UUIDv7Generator',
    'now_utc',
    'FrontmatterError',
    'GenerationError',
    'InputValidationError',
    'NodeError',
    'FrontmatterHandler',
    'Frontmatter',
    'NodePart',
    'MAX_SYNOPSIS_LENGTH',
    'MAX_TITLE_LENGTH',
    'is_uuid_filename',
    'validate_new_node_input',
    'validate_text_field',
]
