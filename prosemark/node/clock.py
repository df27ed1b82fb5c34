"""Time and identifier sources injected into node workflows.

Production code uses SystemClock and UUIDv7Generator; tests pass stubs that
return fixed values.
"""

import os
import time
import uuid
from datetime import datetime, UTC
from typing import Protocol

from .errors import GenerationError


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class TimeSource(Protocol):
    """Supplies the current time as an RFC 3339 UTC string."""

    def now(self) -> str:
        ...


class IDGenerator(Protocol):
    """Supplies new node identifiers (the filename stem, without ".md")."""

    def new_id(self) -> str:
        ...


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as RFC 3339 UTC with second precision and a Z suffix."""
    return moment.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def now_utc() -> str:
    """Current UTC time, e.g. "2026-10-19T12:00:00Z"."""
    return format_timestamp(datetime.now(UTC))


class SystemClock:
    """TimeSource backed by the system clock."""

    def now(self) -> str:
        return now_utc()


def uuid7() -> uuid.UUID:
    """Build a UUIDv7: 48-bit Unix millisecond timestamp, version, variant, random bits."""
    unix_ms = time.time_ns() // 1_000_000
    rand = int.from_bytes(os.urandom(10), 'big')

    value = (unix_ms & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= ((rand >> 62) & 0xFFF) << 64
    value |= 0b10 << 62
    value |= rand & ((1 << 62) - 1)
    return uuid.UUID(int=value)


class UUIDv7Generator:
    """IDGenerator producing lowercase UUIDv7 strings."""

    def new_id(self) -> str:
        try:
            return str(uuid7())
        except OSError as e:
            raise GenerationError(f"entropy source unavailable: {e}")
