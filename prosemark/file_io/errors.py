"""Typed exception hierarchy for filesystem operations."""

from typing import Optional

from prosemark.errors import ProsemarkError


class FilesystemError(ProsemarkError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class SizeLimitExceededError(FilesystemError):
    """Raised when a file is larger than the allowed read ceiling."""

    def __init__(self, file_path: str, size: int, limit: int):
        limit_mb = limit / (1024 * 1024)
        super().__init__(
            file_path,
            'read',
            f"file size ({size} bytes) exceeds the {limit_mb:.0f} MB size limit"
        )
        self.size = size
        self.limit = limit


class ReadOnlyFileError(FilesystemError):
    """Raised when the destination of a write is read-only."""

    def __init__(self, file_path: str):
        super().__init__(file_path, 'write', 'file is read-only')
