"""Domain-specific errors for gostubber."""

from __future__ import annotations


class StubberError(Exception):
    """Base error for gostubber."""


class ConfigError(StubberError):
    """Raised when options or rename directives are malformed."""


class ResolveError(StubberError):
    """Raised when an input package cannot be loaded or does not type-check."""


class UnsupportedInterfaceError(StubberError):
    """Raised when an interface cannot be stubbed from the requested output package."""


class RenderError(StubberError):
    """Raised when the model cannot be rendered to Go source."""


class FormatError(StubberError):
    """Raised when the formatter rejects rendered source.

    The unformatted text is kept on `source` so callers can surface it.
    """

    def __init__(self, message: str, *, source: bytes = b"") -> None:
        super().__init__(message)
        self.source = source


class OutputError(StubberError):
    """Raised when generated files cannot be written."""
