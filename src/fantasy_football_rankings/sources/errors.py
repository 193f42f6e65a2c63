"""Typed failures raised by ranking sources.

A source never signals failure with an empty list. It raises one of these so
the orchestrator can tell "misconfigured" apart from "broken right now".
"""

from __future__ import annotations


class SourceError(Exception):
    """Base error for ranking source failures.

    Attributes:
        message: Human-readable error description.
        cause: Optional underlying exception that caused this error.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class SourceConfigurationError(SourceError):
    """Required configuration (API key, credentials) is missing."""


class SourceNetworkError(SourceError):
    """Transport failure or a non-2xx response."""


class SourceTimeoutError(SourceNetworkError):
    """The source did not answer within the allotted time."""


class SourceAuthenticationError(SourceError):
    """Credentials were supplied but the login was rejected."""


class SourceParseError(SourceError):
    """The payload could not be turned into players."""
