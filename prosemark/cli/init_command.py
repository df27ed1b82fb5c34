"""InitCommand for project initialization.

Creates ``_binder.md`` (holding only the binder pragma) and a commented
``.prosemark.yml`` in the project directory.
"""

import logging
import os
from dataclasses import dataclass

from prosemark.file_io import FilesystemError, file_exists, write_atomic
from .config import (
    BINDER_FILENAME,
    CONFIG_FILENAME,
    DEFAULT_BINDER_CONTENT,
    DEFAULT_CONFIG_CONTENT,
)
from .errors import InitError

logger = logging.getLogger(__name__)

# New project files are private to the user
PROJECT_FILE_MODE = 0o600


@dataclass
class InitResult:
    """What InitCommand.run() did.

    Attributes:
        project_dir: Initialized directory
        binder_path: Path of the written binder
        config_path: Path of the config file
        overwrote: True if existing files were replaced (--force)
    """
    project_dir: str
    binder_path: str
    config_path: str
    overwrote: bool = False


class InitCommand:
    """Handles initialization of a prosemark project.

    Example:
        >>> result = InitCommand().run("./novel")
        >>> result.binder_path
        './novel/_binder.md'
    """

    def run(self, project_dir: str, force: bool = False) -> InitResult:
        """Write the binder and config files.

        The binder is never overwritten without force. The config file is
        only written when missing, or with force.

        Args:
            project_dir: Directory to initialize
            force: Overwrite existing files

        Returns:
            InitResult

        Raises:
            InitError: If the project already exists or a write fails
        """
        binder_path = os.path.join(project_dir, BINDER_FILENAME)
        config_path = os.path.join(project_dir, CONFIG_FILENAME)

        try:
            binder_exists = file_exists(binder_path)
        except FilesystemError as e:
            raise InitError(f"checking {binder_path}: {e}")
        if binder_exists and not force:
            raise InitError(f"{BINDER_FILENAME} already exists in {project_dir}; use --force to overwrite")

        try:
            write_atomic(binder_path, DEFAULT_BINDER_CONTENT.encode('utf-8'), mode=PROJECT_FILE_MODE, temp_prefix=".binder")
        except FilesystemError as e:
            raise InitError(f"writing {BINDER_FILENAME}: {e}")
        logger.info(f"Wrote {binder_path}")

        try:
            config_exists = file_exists(config_path)
        except FilesystemError as e:
            raise InitError(f"checking {config_path}: {e}")

        if not config_exists or force:
            try:
                write_atomic(config_path, DEFAULT_CONFIG_CONTENT.encode('utf-8'), mode=PROJECT_FILE_MODE, temp_prefix=".config")
            except FilesystemError as e:
                raise InitError(
                    f"writing {CONFIG_FILENAME} (partial init; re-run with --force to recover): {e}"
                )
            logger.info(f"Wrote {config_path}")

        return InitResult(
            project_dir=project_dir,
            binder_path=binder_path,
            config_path=config_path,
            overwrote=force and (binder_exists or config_exists),
        )
