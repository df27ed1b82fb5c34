"""Project configuration (.prosemark.yml) and path resolution.

A project is a directory holding ``_binder.md`` and ``.prosemark.yml``:

    # prosemark project configuration
    editor: code --wait

Every key is optional. A missing file, or one holding only comments, yields
the defaults.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

from prosemark.binder.parser import BINDER_FILENAME, BINDER_PRAGMA
from .errors import ConfigError, UsageError


CONFIG_FILENAME = ".prosemark.yml"

DEFAULT_BINDER_CONTENT = BINDER_PRAGMA + "\n"
DEFAULT_CONFIG_CONTENT = "# prosemark project configuration\n"

__all__ = [
    'BINDER_FILENAME',
    'CONFIG_FILENAME',
    'DEFAULT_BINDER_CONTENT',
    'DEFAULT_CONFIG_CONTENT',
    'ConfigLoader',
    'ProjectConfig',
    'resolve_binder_path',
    'resolve_project_dir',
    'resolve_editor_spec',
]


@dataclass
class ProjectConfig:
    """Settings read from .prosemark.yml.

    Attributes:
        editor: Editor command line used when $EDITOR is not set
    """
    editor: str = ""


class ConfigLoader:
    """Loads and validates .prosemark.yml."""

    # Known keys and their expected types
    FIELD_TYPES = {
        'editor': str,
    }

    @classmethod
    def load(cls, config_path: str) -> ProjectConfig:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to .prosemark.yml

        Returns:
            ProjectConfig; defaults when the file does not exist

        Raises:
            ConfigError: If the file cannot be read or is malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return ProjectConfig()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(config_path, f"cannot read file: {e}")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(config_path, f"Invalid YAML syntax: {str(e)}")

        if data is None:
            return ProjectConfig()

        if not isinstance(data, dict):
            raise ConfigError(
                config_path,
                f"Configuration must be a YAML dictionary, got {type(data).__name__}"
            )

        return cls._parse_config(config_path, data)

    @classmethod
    def _parse_config(cls, config_path: str, data: Dict[str, Any]) -> ProjectConfig:
        values = {}
        for key, expected in cls.FIELD_TYPES.items():
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, expected):
                raise ConfigError(
                    config_path,
                    f"'{key}' must be a {expected.__name__}, got {type(value).__name__}"
                )
            values[key] = value
        return ProjectConfig(**values)


def resolve_editor_spec(environ: Mapping[str, str], config: ProjectConfig) -> str:
    """Pick the editor command line: $EDITOR unless blank, else the project setting."""
    editor = environ.get('EDITOR', '')
    if editor.split():
        return editor
    return config.editor


def resolve_project_dir(project: Optional[str]) -> str:
    """Project directory from --project, defaulting to the working directory.

    Raises:
        UsageError: If --project was given as an empty string
    """
    if project is None:
        return os.getcwd()
    if not project:
        raise UsageError("--project flag cannot be empty")
    return project


def resolve_binder_path(project: Optional[str]) -> str:
    """Path of _binder.md inside the project directory."""
    return os.path.join(resolve_project_dir(project), BINDER_FILENAME)
