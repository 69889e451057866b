"""Tests for error hierarchy."""

from eventgate.errors import (
    AuthError,
    ConfigError,
    IngestError,
    NotFoundError,
    ParseError,
    PublishError,
    ValidationError,
)


def test_hierarchy() -> None:
    for cls in (AuthError, ParseError, ValidationError, NotFoundError, PublishError, ConfigError):
        assert issubclass(cls, IngestError)


def test_status_codes() -> None:
    assert AuthError("x").status_code == 401
    assert ParseError("x").status_code == 400
    assert ValidationError("x").status_code == 400
    assert NotFoundError("x").status_code == 404
    assert PublishError("x").status_code == 502


def test_retryable_default() -> None:
    assert IngestError("test").retryable is False
    assert ValidationError("test").retryable is False
    assert PublishError("test").retryable is True


def test_rendered_messages() -> None:
    assert str(AuthError("Invalid JWT format")) == "Unauthorized: Invalid JWT format"
    assert str(ParseError("Expecting value")) == "Invalid JSON in request body: Expecting value"
    assert str(ValidationError("o (origin) is required")) == "o (origin) is required"


def test_publish_error_carries_counts() -> None:
    err = PublishError("boom", succeeded=2, failed=1)
    assert err.succeeded == 2
    assert err.failed == 1
    assert err.results == []
