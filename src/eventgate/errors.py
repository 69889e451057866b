"""Eventgate exception hierarchy.

Every failure the ingest pipeline can produce inherits from IngestError,
which carries the HTTP status the error surfaces as and whether the caller
may retry the same request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventgate.stream.base import RecordResult


class IngestError(Exception):
    """Base exception for all Eventgate errors."""

    status_code = 500

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class AuthError(IngestError):
    """Missing or malformed bearer credential."""

    status_code = 401

    def __str__(self) -> str:
        return f"Unauthorized: {self.message}"


class ParseError(IngestError):
    """Request body is not a decodable JSON document of the expected shape."""

    status_code = 400

    def __str__(self) -> str:
        return f"Invalid JSON in request body: {self.message}"


class ValidationError(IngestError):
    """Variant-specific required-field violation."""

    status_code = 400


class NotFoundError(IngestError):
    """Unknown route."""

    status_code = 404


class PublishError(IngestError):
    """One or more stream writes failed."""

    status_code = 502

    def __init__(
        self,
        message: str = "",
        *,
        succeeded: int = 0,
        failed: int = 0,
        results: list[RecordResult] | None = None,
    ) -> None:
        super().__init__(message, retryable=True)
        self.succeeded = succeeded
        self.failed = failed
        self.results = results or []


class ConfigError(IngestError):
    """Invalid or missing configuration."""
