"""Custom exceptions for Taskboard CLI."""

from __future__ import annotations


class TaskboardError(Exception):
    """Base exception for all Taskboard errors."""


class NetworkOrServerError(TaskboardError):
    """Raised on a non-success response or a transport failure."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(NetworkOrServerError):
    """Raised when the server rejects the request with 401."""


class ValidationError(NetworkOrServerError):
    """Raised when the server rejects the submitted data as malformed."""


class ParseError(TaskboardError, ValueError):
    """Raised when a calendar date cannot be parsed or does not exist."""
