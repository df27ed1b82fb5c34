"""External editor launching.

The editor setting is a command line such as ``vim`` or ``code --wait``. It
is split on whitespace; the first token is the executable and the remaining
tokens are passed before the file path.
"""

import logging
import subprocess
from typing import Callable, List, Optional

from .errors import EditorError, EditorNotConfiguredError

logger = logging.getLogger(__name__)


def split_editor_spec(editor_spec: str) -> List[str]:
    """Tokenize an editor setting on any Unicode whitespace."""
    return editor_spec.split()


def is_editor_configured(editor_spec: str) -> bool:
    """Report whether editor_spec names an executable (not blank or whitespace)."""
    return bool(split_editor_spec(editor_spec or ""))


class EditorSession:
    """Opens a file in the user's editor and waits for it to exit.

    The editor inherits the terminal (stdin, stdout and stderr) and runs
    without a timeout.

    Example:
        >>> EditorSession().open("code --wait", "chapter.md")
    """

    def __init__(self, runner: Optional[Callable[..., subprocess.CompletedProcess]] = None):
        """Initialize editor session.

        Args:
            runner: Callable with the signature of subprocess.run
                    (default: subprocess.run)
        """
        self.runner = runner or subprocess.run

    def open(self, editor_spec: str, path: str) -> None:
        """Open path in the configured editor and block until it exits.

        Args:
            editor_spec: Raw editor setting
            path: File to edit

        Raises:
            EditorNotConfiguredError: If editor_spec has no tokens; nothing is launched
            EditorError: If the editor cannot be launched or exits non-zero
        """
        tokens = split_editor_spec(editor_spec or "")
        if not tokens:
            raise EditorNotConfiguredError()

        command = [tokens[0], *tokens[1:], path]
        logger.info(f"Launching editor: {' '.join(command)}")

        try:
            result = self.runner(command, check=False)
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL in the command line
            logger.error(f"Editor launch failed: {e}")
            raise EditorError(f"opening editor: {e}") from e

        if result.returncode != 0:
            logger.error(f"Editor exited with code {result.returncode}")
            raise EditorError(
                f"opening editor: {tokens[0]} exited with code {result.returncode}",
                returncode=result.returncode,
            )

        logger.debug(f"Editor closed {path}")
