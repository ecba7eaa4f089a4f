"""
Exception types raised by the static file server.

    StaticServerError
    ├── ConfigError               (also a ValueError)
    └── ResponseError
        ├── ResponseAlreadyEndedError
        ├── RedirectError
        ├── CustomHeadersError
        └── SendFileError         (also an OSError)

Handlers never let these escape to the host pipeline: redirect, header
setter and send failures are recorded on ``response.error`` instead.
"""

from typing import Optional


class StaticServerError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(StaticServerError, ValueError):
    """Raised when options fail validation at construction time."""


class ResponseError(StaticServerError):
    """Raised when a response operation cannot be completed."""


class ResponseAlreadyEndedError(ResponseError):
    """Raised when writing to a response that has already been ended."""


class RedirectError(ResponseError):
    """Raised when a redirect cannot be issued."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.location = location


class SendFileError(ResponseError, OSError):
    """
    Raised when a file cannot be transferred into a response.

    Subclasses OSError so callers can catch I/O failures from metadata
    lookups and from the transfer itself with a single clause.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CustomHeadersError(ResponseError):
    """Raised when a custom headers setter fails. The original error is ``__cause__``."""
