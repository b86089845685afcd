"""Error Hierarchy — typed, categorized exceptions for all notification failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; configuration and infrastructure
      errors (5xx) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with NudgeError base: the agent converts it into an
      OperationResult, the API's global handler converts it into JSON
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
    CONFIGURATION = "configuration"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    notification_type: str | None = None
    step_name: str | None = None
    debug_info: dict[str, Any] | None = None


class NudgeError(Exception):
    """Base exception for all notification agent errors."""

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
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "notification_type": self.context.notification_type,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class NotificationsDisabledError(NudgeError):
    """The whole notification system is switched off in configuration."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Notifications are disabled",
            "NOTIFICATIONS_DISABLED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, context, 409,
        )


class TriggerDisabledError(NudgeError):
    """The trigger for this notification type is disabled."""
    def __init__(self, notification_type: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(notification_type=notification_type)
        super().__init__(
            f"Notification trigger '{notification_type}' is disabled",
            "TRIGGER_DISABLED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, ctx, 409,
        )
        self.notification_type = notification_type


class NoMatchingPendingError(NudgeError):
    """No pending notification matched the reply or clear request."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(user_id=user_id)
        super().__init__(
            f"No matching pending notification for user '{user_id}'",
            "NO_MATCHING_PENDING", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, ctx, 404,
        )
        self.user_id = user_id


class CapacityExceededError(NudgeError):
    """User already holds max_pending_per_user notifications."""
    def __init__(
        self, user_id: str, max_pending: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(user_id=user_id)
        super().__init__(
            f"User '{user_id}' already has {max_pending} pending notification(s)",
            "CAPACITY_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 429,
        )
        self.max_pending = max_pending


class InvalidContextError(NudgeError):
    """Notification context failed type validation."""
    def __init__(
        self, notification_type: str, message: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(notification_type=notification_type)
        super().__init__(
            f"Invalid context for '{notification_type}': {message}",
            "INVALID_CONTEXT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )


# ─── Configuration Errors ───────────────────────────────────────

class ConfigurationMissingError(NudgeError):
    """A referenced notification type lacks a trigger, timeout or template."""
    def __init__(self, missing: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Missing notification configuration: {', '.join(missing)}",
            "CONFIGURATION_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.missing = missing


class ConfigurationInvalidError(NudgeError):
    """Notification configuration is present but malformed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid notification configuration: {message}",
            "CONFIGURATION_INVALID", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class UserUnreachableError(NudgeError):
    """The messaging client could not resolve or message the user."""
    def __init__(
        self, user_id: str, reason: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(user_id=user_id)
        super().__init__(
            f"User '{user_id}' unreachable: {reason}",
            "USER_UNREACHABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, ctx, 502,
        )
        self.user_id = user_id
        self.reason = reason


class MessagingError(NudgeError):
    """Messaging platform API call failed."""
    def __init__(
        self,
        message: str,
        operation: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Messaging {operation} failed: {message}",
            "MESSAGING_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.operation = operation
        self.status_code = status_code


class DatabaseError(NudgeError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
