"""Exceptions raised by the digest engine."""

from __future__ import annotations


class InputUnavailableError(OSError):
    """The byte source could not be opened or read to completion."""

    def __init__(self, path, cause) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error reading '{path}': {cause}")


class InvalidUsageError(ValueError):
    """A digest was requested without an identifiable input source."""
