"""Error Hierarchy — typed, categorized exceptions for all tea rotation failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() always carries the human message under "error" (client contract)

Design Decisions:
    - Single hierarchy with TeaRotationError base: FastAPI global handler catches all
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
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TeaRotationError(Exception):
    """Base exception for all tea rotation errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": self.message,
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "session_id": self.context.session_id,
                "user_id": self.context.user_id,
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class NoOrdersFoundError(TeaRotationError):
    """Session has no non-excused orders to summarize."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            "No orders found for this session.",
            "NO_ORDERS_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class InvalidAssigneeError(TeaRotationError):
    """Confirmed assignee is not among the session's participants."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        super().__init__(
            "Invalid assignee selected.",
            "INVALID_ASSIGNEE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )


class SessionClosedError(TeaRotationError):
    """Order change attempted on a completed session."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            "This tea session has already been summarized.",
            "SESSION_CLOSED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class DuplicateUserNameError(TeaRotationError):
    """A user with the same name (case-insensitive) already exists."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            "A user with this name already exists",
            "DUPLICATE_USER_NAME", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.name = name


class ResourceNotFoundError(TeaRotationError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConcurrentModificationError(TeaRotationError):
    """Session was no longer active when the commit tried to close it."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            "This tea session was already summarized by someone else.",
            "CONCURRENT_MODIFICATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TeaRotationError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
