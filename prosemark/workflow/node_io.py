"""Filesystem capability used by node workflows.

NodeCreationTransaction and PostEditRefresher receive a NodeCreationIO
instead of touching the filesystem directly; tests pass a recording fake.
"""

from typing import Protocol

from prosemark.file_io import (
    MAX_BINDER_SIZE,
    create_exclusive,
    delete_file,
    file_exists,
    read_file,
    read_size_limited,
    write_atomic,
)


class NodeCreationIO(Protocol):
    """Every filesystem operation a node workflow may perform."""

    def read_binder(self, path: str) -> bytes:
        ...

    def write_binder_atomic(self, path: str, data: bytes) -> None:
        ...

    def write_node_atomic(self, path: str, data: bytes) -> None:
        ...

    def read_node_file(self, path: str) -> bytes:
        ...

    def delete_file(self, path: str) -> None:
        ...

    def node_exists(self, path: str) -> bool:
        ...


class EditIO(NodeCreationIO, Protocol):
    """NodeCreationIO plus creation of empty notes files."""

    def create_notes_file(self, path: str) -> None:
        ...


class FileNodeCreationIO:
    """NodeCreationIO backed by prosemark.file_io.

    Binder reads are rejected above max_binder_size before any byte is read.
    Both binder and node writes are atomic.
    """

    def __init__(self, max_binder_size: int = MAX_BINDER_SIZE):
        self.max_binder_size = max_binder_size

    def read_binder(self, path: str) -> bytes:
        return read_size_limited(path, self.max_binder_size)

    def write_binder_atomic(self, path: str, data: bytes) -> None:
        write_atomic(path, data, temp_prefix=".binder")

    def write_node_atomic(self, path: str, data: bytes) -> None:
        write_atomic(path, data, temp_prefix=".node")

    def read_node_file(self, path: str) -> bytes:
        return read_file(path)

    def delete_file(self, path: str) -> None:
        delete_file(path)

    def node_exists(self, path: str) -> bool:
        return file_exists(path)

    def create_notes_file(self, path: str) -> None:
        """Create an empty notes file, failing if one already exists."""
        create_exclusive(path)
