"""YAML frontmatter parsing and generation for node files.

A node file is a YAML frontmatter block followed by free-form prose:

    ---
    id: 0192f0c1-2345-7abc-8def-0123456789ab
    title: Chapter One
    created: 2026-10-19T12:00:00Z
    updated: 2026-10-19T12:00:00Z
    ---
    The body starts here.

The body is handled as raw bytes and is never decoded, so whatever an editor
wrote after the header is forwarded untouched.
"""

import re
from typing import Any, Dict, Tuple

import yaml

from .errors import FrontmatterError
from .models import Frontmatter


_TIMESTAMP_TAG = 'tag:yaml.org,2002:timestamp'


def _without_timestamp_resolver(resolvers: Dict[Any, list]) -> Dict[Any, list]:
    return {
        first_char: [(tag, regexp) for tag, regexp in entries if tag != _TIMESTAMP_TAG]
        for first_char, entries in resolvers.items()
    }


class _FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps RFC 3339 timestamps as plain strings."""


class _FrontmatterDumper(yaml.SafeDumper):
    """SafeDumper that writes timestamp-like strings without quotes."""


_FrontmatterLoader.yaml_implicit_resolvers = _without_timestamp_resolver(
    yaml.SafeLoader.yaml_implicit_resolvers
)
_FrontmatterDumper.yaml_implicit_resolvers = _without_timestamp_resolver(
    yaml.SafeDumper.yaml_implicit_resolvers
)

# YAML reads these as line breaks in plain and single-quoted scalars
_UNICODE_LINE_BREAKS = frozenset("\x85\u2028\u2029")


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(ch in _UNICODE_LINE_BREAKS for ch in data):
        return dumper.represent_scalar('tag:yaml.org,2002:str', data, style='"')
    return dumper.represent_str(data)


_FrontmatterDumper.add_representer(str, _represent_str)


class FrontmatterHandler:
    """Serializes and parses node frontmatter.

    Field order is fixed: id, title, synopsis, created, updated. Empty
    optional fields (title, synopsis) are omitted entirely.

    The closing "---" must start at column 0. YAML never emits an unindented
    "---" inside a value, so the first such line always ends the header.
    """

    FRONTMATTER_PATTERN = re.compile(rb'\A---\n(.*?)\n---\n', re.DOTALL)

    FIELD_ORDER = ('id', 'title', 'synopsis', 'created', 'updated')

    OPTIONAL_FIELDS = frozenset({'title', 'synopsis'})

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def serialize(cls, fm: Frontmatter) -> bytes:
        """Serialize frontmatter into a complete "---" delimited header block.

        Args:
            fm: Frontmatter to serialize

        Returns:
            Header bytes ending with "---\\n"; append the body to get a node file
        """
        fields = {}
        for name in cls.FIELD_ORDER:
            value = getattr(fm, name)
            if name in cls.OPTIONAL_FIELDS and not value:
                continue
            fields[name] = value

        yaml_str = yaml.dump(
            fields,
            Dumper=_FrontmatterDumper,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=1 << 16,
        )
        return b"---\n" + yaml_str.encode('utf-8') + b"---\n"

    @classmethod
    def parse(cls, content: bytes) -> Tuple[Frontmatter, bytes]:
        """Split node file content into frontmatter and body.

        Args:
            content: Full node file content

        Returns:
            Tuple of (Frontmatter, body bytes exactly as found after the header)

        Raises:
            FrontmatterError: If the header is missing or malformed
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            raise FrontmatterError("no valid frontmatter block found")

        try:
            header = match.group(1).decode('utf-8')
        except UnicodeDecodeError as e:
            raise FrontmatterError(f"frontmatter is not valid UTF-8: {e}")

        try:
            data = yaml.load(header, Loader=_FrontmatterLoader)
        except yaml.YAMLError as e:
            raise FrontmatterError(f"Invalid YAML syntax: {str(e)}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise FrontmatterError(
                f"Frontmatter must be a YAML dictionary, got {type(data).__name__}"
            )

        cls._validate_yaml_depth(data)

        fm = Frontmatter(
            id=cls._scalar(data, 'id'),
            created=cls._scalar(data, 'created'),
            updated=cls._scalar(data, 'updated'),
            title=cls._scalar(data, 'title'),
            synopsis=cls._scalar(data, 'synopsis'),
        )
        return fm, content[match.end():]

    @staticmethod
    def _scalar(data: dict, key: str) -> str:
        value = data.get(key)
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            raise FrontmatterError(f"Field '{key}' must be a scalar value")
        return str(value)
