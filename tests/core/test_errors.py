"""Errors — tests for the error hierarchy and response shape."""

from coachtrack.core.errors import (
    ConflictError, EditWindowClosedError, ErrorCategory, ForbiddenError,
    ImageLimitExceededError, InputValidationError, ResourceNotFoundError,
    TransientError, UnauthenticatedError, WeeklyQuotaExceededError,
)


def test_specialized_errors_keep_their_category():
    assert isinstance(EditWindowClosedError("late"), ForbiddenError)
    assert isinstance(ImageLimitExceededError(3), InputValidationError)
    assert isinstance(WeeklyQuotaExceededError(2025, 11), ConflictError)
    assert UnauthenticatedError().category == ErrorCategory.UNAUTHENTICATED


def test_only_transient_errors_are_retryable():
    assert TransientError("timeout", "storage.delete").retryable
    assert not ConflictError("dup").retryable


def test_not_found_response_carries_resource():
    body = ResourceNotFoundError("report", "abc").to_response()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["category"] == "resource_not_found"
    assert body["context"]["resource_type"] == "report"
    assert body["context"]["resource_id"] == "abc"


def test_transient_response_carries_retry_hint():
    exc = TransientError("timeout", "storage.sign_upload", retry_after_ms=2000)
    body = exc.to_response()["error"]
    assert exc.message == "storage.sign_upload failed: timeout"
    assert body["retryable"] is True
    assert body["context"]["retry_after_ms"] == 2000


def test_edit_window_message_includes_reason():
    assert EditWindowClosedError("too late").message == "edit window closed: too late"
