"""Error Hierarchy — typed, categorized exceptions for every CoachTrack failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Six kinds only: unauthenticated, forbidden, not found, validation, conflict, transient
    - Core errors carry no transport status; api/error_handlers.py owns the mapping
    - to_response() produces the REST envelope and never leaks internal details

Design Decisions:
    - Single hierarchy with CoachTrackError base: FastAPI global handler catches all (ADR: uniform error shape)
    - Rule-specific subclasses (quota, edit window, image ceiling) keep their parent kind,
      so callers can catch broadly (ConflictError) or narrowly (WeeklyQuotaExceededError)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """The error kinds a core operation may raise."""
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    RESOURCE_NOT_FOUND = "resource_not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    TRANSIENT = "transient"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    principal_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class CoachTrackError(Exception):
    """Base exception for all CoachTrack errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Caller Errors ──────────────────────────────────────────────

class UnauthenticatedError(CoachTrackError):
    """No principal could be resolved for the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required",
            "UNAUTHENTICATED", ErrorCategory.UNAUTHENTICATED,
            ErrorSeverity.WARNING, context,
        )


class ForbiddenError(CoachTrackError):
    """Principal is known and in scope but may not perform the operation."""
    def __init__(
        self, message: str, code: str = "FORBIDDEN",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.FORBIDDEN,
            ErrorSeverity.WARNING, context,
        )


class EditWindowClosedError(ForbiddenError):
    """Report is no longer mutable by its owner."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"edit window closed: {reason}", "EDIT_WINDOW_CLOSED", context,
        )
        self.reason = reason


class ResourceNotFoundError(CoachTrackError):
    """Requested resource does not exist or is outside the principal's scope."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InputValidationError(CoachTrackError):
    """Malformed or out-of-range input."""
    def __init__(
        self, message: str, field: str | None = None,
        code: str = "VALIDATION_ERROR", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.field = field


class ImageLimitExceededError(InputValidationError):
    """Report already holds the maximum number of live images."""
    def __init__(self, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"image limit exceeded: at most {limit} images per report",
            field="images", code="IMAGE_LIMIT_EXCEEDED", context=context,
        )
        self.limit = limit


class ConflictError(CoachTrackError):
    """State conflict: duplicates, unique-key races, assignment state."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )


class WeeklyQuotaExceededError(ConflictError):
    """Client already has the maximum number of live reports this ISO week."""
    def __init__(
        self, year: int, week_number: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.debug_info = {"year": year, "week_number": week_number}
        super().__init__(
            "weekly quota exceeded", "WEEKLY_QUOTA_EXCEEDED", ctx,
        )
        self.year = year
        self.week_number = week_number


# ─── Infrastructure Errors ──────────────────────────────────────

class TransientError(CoachTrackError):
    """Storage, network or timeout failure — safe to retry (except submit)."""
    def __init__(
        self, message: str, operation: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"{operation} failed: {message}",
            "TRANSIENT_ERROR", ErrorCategory.TRANSIENT,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
