"""Typed exception hierarchy for binder errors."""

from prosemark.errors import ProsemarkError


class BinderError(ProsemarkError):
    """Base exception for all binder errors."""
    pass


class BinderParseError(BinderError):
    """Raised when binder content cannot be parsed at all (e.g. invalid UTF-8)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
