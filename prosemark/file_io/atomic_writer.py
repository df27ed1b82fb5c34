"""Atomic, size-limited file operations for binder and node files.

Writes go to a temporary file in the destination's own directory (so the
final rename never crosses filesystems) and are then moved over the
destination with os.replace(). A failure at any step removes the temporary
file and leaves the destination exactly as it was.
"""

import logging
import os
import stat
import tempfile
from typing import Optional

from .errors import FilesystemError, ReadOnlyFileError, SizeLimitExceededError


logger = logging.getLogger(__name__)

# Maximum binder size accepted before parsing
MAX_BINDER_SIZE = 10 * 1024 * 1024  # 10 MB in bytes


def ensure_writable(path: str) -> None:
    """Reject a write to an existing destination whose owner-write bit is clear.

    Args:
        path: Destination path

    Raises:
        ReadOnlyFileError: If the destination exists and is read-only
        FilesystemError: If the destination cannot be inspected
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise FilesystemError(path, 'stat', str(e))

    if not st.st_mode & stat.S_IWUSR:
        raise ReadOnlyFileError(path)


def write_atomic(
    path: str,
    data: bytes,
    mode: Optional[int] = None,
    temp_prefix: str = ".node",
) -> None:
    """Write data to path atomically via temp file and rename.

    Args:
        path: Destination path
        data: Complete new content
        mode: Permission bits for the result. When None, an existing
              destination keeps its mode and a new file keeps the 0600
              default of mkstemp.
        temp_prefix: Leading label of the temp file name (".node", ".binder")

    Raises:
        ReadOnlyFileError: If the destination exists and is read-only
        FilesystemError: If any step fails (the destination is left unchanged)
    """
    ensure_writable(path)

    if mode is None:
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            mode = None
        except OSError as e:
            raise FilesystemError(path, 'stat', str(e))

    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f"{temp_prefix}-", suffix=".tmp")
    except OSError as e:
        raise FilesystemError(path, 'write', f"creating temp file: {e}")

    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as e:
        _remove_temp(tmp_path)
        raise FilesystemError(path, 'write', str(e))
    except BaseException:
        _remove_temp(tmp_path)
        raise

    logger.debug(f"Wrote {len(data)} byte(s) to {path}")


def _remove_temp(tmp_path: str) -> None:
    try:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    except OSError as e:
        logger.warning(f"Failed to remove temp file {tmp_path}: {e}")


def read_size_limited(path: str, max_size: int = MAX_BINDER_SIZE) -> bytes:
    """Read a file, rejecting it before reading if it exceeds max_size.

    Args:
        path: File to read
        max_size: Maximum allowed size in bytes (default: MAX_BINDER_SIZE)

    Returns:
        File content

    Raises:
        FileNotFoundError: If the file does not exist
        SizeLimitExceededError: If the file is larger than max_size
        FilesystemError: If the file cannot be read
    """
    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        raise
    except OSError as e:
        raise FilesystemError(path, 'stat', str(e))

    if size > max_size:
        raise SizeLimitExceededError(path, size, max_size)

    return read_file(path)


def read_file(path: str) -> bytes:
    """Read a whole file as bytes.

    Raises:
        FileNotFoundError: If the file does not exist
        FilesystemError: For any other read failure
    """
    try:
        with open(path, 'rb') as f:
            return f.read()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise FilesystemError(path, 'read', str(e))


def delete_file(path: str) -> None:
    """Remove a file.

    Raises:
        FilesystemError: If the file cannot be removed
    """
    try:
        os.remove(path)
    except OSError as e:
        raise FilesystemError(path, 'delete', str(e))
    logger.debug(f"Deleted {path}")


def file_exists(path: str) -> bool:
    """Report whether path exists; unexpected stat errors propagate.

    Raises:
        FilesystemError: If the path cannot be inspected
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FilesystemError(path, 'stat', str(e))
    return True


def create_exclusive(path: str) -> None:
    """Create an empty file, failing if it already exists.

    Raises:
        FileExistsError: If the file already exists
        FilesystemError: For any other failure
    """
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
    except FileExistsError:
        raise
    except OSError as e:
        raise FilesystemError(path, 'create', str(e))
    os.close(fd)
