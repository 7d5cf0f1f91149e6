"""Exception types raised by tgrapher.

Library modules raise these; tgrapher.app.cli turns them into a one line
error message and exit status 1.
"""

from __future__ import annotations

from typing import Optional


class TGrapherError(Exception):
    """Base exception for all tgrapher errors."""

    def __init__(self, message: str, details: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class UsageError(TGrapherError):
    """Invalid command line."""


class SourceError(TGrapherError):
    """The input file could not be read."""


class TableNotFoundError(SourceError):
    """The named table is not present in the input file."""


class MissingColumnError(TGrapherError, ValueError):
    """A column required for the graph is not present in the table."""


class ExportError(TGrapherError):
    """The graph could not be written."""


class ConfigError(TGrapherError):
    """The graph config file could not be written."""
