"""Error Hierarchy: typed, categorized exceptions for all SwapSquare failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable and leave stored state unchanged
    - InfrastructureError (503) is the only critical error; it is never swallowed
    - to_response() produces the tagged failure envelope returned by the API
    - AuthError carries the Identity Provider message verbatim

Design Decisions:
    - Single hierarchy with SwapSquareError base: FastAPI global handler catches all
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
    AUTHORIZATION = "authorization"
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    item_id: str | None = None
    swap_id: str | None = None
    debug_info: dict[str, Any] | None = None


class SwapSquareError(Exception):
    """Base exception for all SwapSquare errors."""

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

    @property
    def recoverable(self) -> bool:
        return self.severity is not ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "recoverable": self.recoverable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "item_id": self.context.item_id,
                    "swap_id": self.context.swap_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(SwapSquareError):
    """Malformed or missing input, user-correctable."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ForbiddenError(SwapSquareError):
    """Caller is not the party required for this operation."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )


class ResourceNotFoundError(SwapSquareError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(SwapSquareError):
    """Operation is illegal for the swap's current status."""
    def __init__(
        self, action: str, status: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot {action} a swap that is {status}",
            "INVALID_STATE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.action = action
        self.status = status


class InvalidSwapError(SwapSquareError):
    """Proposal is malformed, e.g. both items belong to the proposer."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_SWAP", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class LimitExceededError(SwapSquareError):
    """Owner already has the maximum number of live items."""
    def __init__(self, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"You can only post up to {limit} items. Delete one to post a new item.",
            "LIMIT_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.limit = limit


class ItemUnavailableError(SwapSquareError):
    """Item is locked in another swap and cannot be committed."""
    def __init__(self, item_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Item '{item_id}' is locked in another swap",
            "ITEM_UNAVAILABLE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.item_id = item_id


class ItemLockedError(SwapSquareError):
    """Item is locked in a swap; resolve the swap before deleting it."""
    def __init__(self, item_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Item '{item_id}' is locked in a swap. Resolve the swap to delete it.",
            "ITEM_LOCKED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.item_id = item_id


class PayloadTooLargeError(SwapSquareError):
    """An uploaded image exceeds the per-image size ceiling."""
    def __init__(
        self, filename: str, max_bytes: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Image '{filename}' is too large. "
            f"Please upload images under {max_bytes // 1024} KB each.",
            "PAYLOAD_TOO_LARGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 413,
        )
        self.filename = filename
        self.max_bytes = max_bytes


class NotAcceptedError(SwapSquareError):
    """Messaging attempted on a swap that is not accepted."""
    def __init__(self, status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Chat is only available for accepted swaps (swap is {status})",
            "NOT_ACCEPTED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.status = status


class AuthError(SwapSquareError):
    """Identity Provider rejected the request. Message is passed through verbatim."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "AUTH_ERROR", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.ERROR, context, 401,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InfrastructureError(SwapSquareError):
    """Persistent Store or Identity Provider is unavailable."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Infrastructure {operation} failed: {message}",
            "INFRASTRUCTURE_ERROR", ErrorCategory.INFRASTRUCTURE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
