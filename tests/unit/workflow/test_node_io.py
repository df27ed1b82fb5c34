"""Unit tests for workflow.node_io module."""

import os
import stat

import pytest

from prosemark.file_io.errors import SizeLimitExceededError
from prosemark.workflow.node_io import FileNodeCreationIO


class TestFileNodeCreationIO:
    """Test cases for the filesystem-backed NodeCreationIO."""

    def test_binder_round_trip(self, tmp_path):
        io = FileNodeCreationIO()
        path = str(tmp_path / "_binder.md")

        io.write_binder_atomic(path, b"<!-- prosemark-binder:v1 -->\n")

        assert io.read_binder(path) == b"<!-- prosemark-binder:v1 -->\n"

    def test_binder_over_limit_is_rejected(self, tmp_path):
        path = tmp_path / "_binder.md"
        path.write_bytes(b"x" * 11)

        with pytest.raises(SizeLimitExceededError):
            FileNodeCreationIO(max_binder_size=10).read_binder(str(path))

    def test_node_write_read_delete(self, tmp_path):
        io = FileNodeCreationIO()
        path = str(tmp_path / "node.md")

        assert not io.node_exists(path)
        io.write_node_atomic(path, b"---\nid: x\n---\n")
        assert io.node_exists(path)
        assert io.read_node_file(path) == b"---\nid: x\n---\n"

        io.delete_file(path)

        assert not os.path.exists(path)

    def test_node_files_are_private(self, tmp_path):
        path = tmp_path / "node.md"

        FileNodeCreationIO().write_node_atomic(str(path), b"data")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_create_notes_file(self, tmp_path):
        io = FileNodeCreationIO()
        path = tmp_path / "id.notes.md"

        io.create_notes_file(str(path))

        assert path.read_bytes() == b""
        with pytest.raises(FileExistsError):
            io.create_notes_file(str(path))
