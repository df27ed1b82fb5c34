"""Atomic file I/O for prosemark projects.

Temp-file-then-rename writes, size-limited reads and read-only detection
used for both binder and node files.
"""

from .atomic_writer import (
    MAX_BINDER_SIZE,
    create_exclusive,
    delete_file,
    ensure_writable,
    file_exists,
    read_file,
    read_size_limited,
    write_atomic,
)
from .errors import FilesystemError, ReadOnlyFileError, SizeLimitExceededError

__all__ = [
    'MAX_BINDER_SIZE',
    'create_exclusive',
    'delete_file',
    'ensure_writable',
    'file_exists',
    'read_file',
    'read_size_limited',
    'write_atomic',
    'FilesystemError',
    'ReadOnlyFileError',
    'SizeLimitExceededError',
]
