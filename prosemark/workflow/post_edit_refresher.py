"""Refresh of a node's ``updated`` timestamp after an editor session."""

import logging

from prosemark.node.clock import TimeSource
from prosemark.node.frontmatter_handler import FrontmatterHandler

from .errors import StepError
from .node_io import NodeCreationIO

logger = logging.getLogger(__name__)

STEP_READ = "reading node file after edit"
STEP_PARSE = "parsing node file after edit"
STEP_WRITE = "refreshing node file after edit"


class PostEditRefresher:
    """Stamps ``updated`` on a node file and keeps everything else.

    The file is re-read from disk after the editor exits so the prose the
    user just wrote is carried over byte for byte. ``created`` and ``id`` are
    never changed.
    """

    def __init__(self, io: NodeCreationIO, clock: TimeSource):
        self.io = io
        self.clock = clock

    def refresh(self, path: str) -> None:
        """Re-read path, update its timestamp and write it back atomically.

        Raises:
            StepError: With step STEP_READ, STEP_PARSE or STEP_WRITE; read
                       and parse failures leave the file untouched
        """
        try:
            content = self.io.read_node_file(path)
        except Exception as e:
            raise StepError(STEP_READ, e) from e

        try:
            fm, body = FrontmatterHandler.parse(content)
        except Exception as e:
            raise StepError(STEP_PARSE, e) from e

        fm.updated = self.clock.now()
        refreshed = FrontmatterHandler.serialize(fm) + body

        try:
            self.io.write_node_atomic(path, refreshed)
        except Exception as e:
            raise StepError(STEP_WRITE, e) from e

        logger.debug(f"Refreshed updated timestamp of {path} to {fm.updated}")
