"""Validation of user-supplied node fields and target filenames."""

import os
import re

from .errors import InputValidationError


# Limits are in UTF-8 bytes
MAX_TITLE_LENGTH = 500
MAX_SYNOPSIS_LENGTH = 2000

# A title becomes the text of a one-line binder link
LINE_BREAK_CHARS = frozenset("\n\r\x0b\x0c\x85\u2028\u2029")

# Lowercase UUIDv7 filenames with a .md extension
UUID_FILENAME_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-7[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}\.md$'
)


def is_uuid_filename(filename: str) -> bool:
    """Report whether filename is a lowercase UUIDv7 .md filename."""
    return UUID_FILENAME_PATTERN.match(filename) is not None


def contains_control_chars(value: str) -> bool:
    """Report whether value holds a control character not allowed in frontmatter.

    TAB, LF, VT, FF and CR (U+0009..U+000D) are allowed; everything else below
    U+0020, and DEL (U+007F), is rejected.
    """
    for ch in value:
        code = ord(ch)
        if code == 0x7F or (code < 0x20 and not 0x09 <= code <= 0x0D):
            return True
    return False


def utf8_length(value: str) -> int:
    """Length of value in UTF-8 bytes."""
    return len(value.encode("utf-8", "surrogatepass"))


def contains_line_break(value: str) -> bool:
    """Report whether value holds a line or paragraph separator."""
    return any(ch in LINE_BREAK_CHARS for ch in value)


def validate_text_field(field: str, value: str, max_length: int) -> None:
    """Validate a free-text frontmatter field (length and control characters).

    Args:
        field: Field name used in the error message ("title", "synopsis")
        value: Value to check
        max_length: Maximum length in UTF-8 bytes

    Raises:
        InputValidationError: If the value is too long or has control characters
    """
    if utf8_length(value) > max_length:
        raise InputValidationError(
            field, f"{field} must be {max_length} bytes or fewer in UTF-8"
        )
    if contains_control_chars(value):
        raise InputValidationError(
            field, f"{field} must not contain control characters"
        )


def validate_new_node_input(target: str, title: str, synopsis: str) -> None:
    """Validate the inputs of a node-creation request.

    target may be empty, in which case the caller generates one. At least one
    of title or synopsis must be given.

    Raises:
        InputValidationError: On the first invalid input found
    """
    if target:
        if os.sep in target or '/' in target:
            raise InputValidationError('target', "target must not contain path separators")
        if not is_uuid_filename(target):
            raise InputValidationError(
                'target', "target must be a valid UUID filename when creating a new node"
            )
    if not title and not synopsis:
        raise InputValidationError(
            'title', "title or synopsis is required when creating a new node"
        )
    validate_text_field('title', title, MAX_TITLE_LENGTH)
    if contains_line_break(title):
        raise InputValidationError('title', "title must be a single line")
    validate_text_field('synopsis', synopsis, MAX_SYNOPSIS_LENGTH)
