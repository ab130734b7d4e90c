"""Exception hierarchy for the Batch Operations MCP server.

All errors raised by the batch engine derive from ``BatchOpsError`` so the tool
boundary can render them uniformly. Individual operation failures are captured
into the batch summary; only request validation problems reach the caller.
"""

from __future__ import annotations

from typing import Any


class BatchOpsError(Exception):
    """Base class for all batch operation errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary for structured logging."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class ValidationError(BatchOpsError):
    """Raised when a batch request does not match the expected shape."""

    def __init__(self, message: str, field: str | None = None, **kwargs):
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)
        self.field = field


class OperationError(BatchOpsError):
    """Raised when a single file operation fails after all attempts."""

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        path: str | None = None,
        attempts: int | None = None,
        error_code: str = "OPERATION_FAILED",
        **kwargs,
    ):
        details = kwargs.pop("details", {}) or {}
        if kind:
            details["kind"] = kind
        if path:
            details["path"] = path
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message, error_code=error_code, details=details, **kwargs)
        self.kind = kind
        self.path = path
        self.attempts = attempts


class DestinationRequiredError(OperationError):
    """Raised when a copy or move operation has no destination."""

    def __init__(self, kind: str, path: str | None = None):
        super().__init__(
            f"Destination required for {kind}",
            kind=kind,
            path=path,
            error_code="DESTINATION_REQUIRED",
        )


class OperationTimeoutError(OperationError):
    """Raised when a single attempt exceeds the configured deadline."""

    def __init__(self, timeout_ms: int, kind: str | None = None, path: str | None = None):
        super().__init__(
            f"Operation timed out after {timeout_ms} ms",
            kind=kind,
            path=path,
            error_code="OPERATION_TIMEOUT",
            details={"timeout_ms": timeout_ms},
        )
        self.timeout_ms = timeout_ms


class StopOnErrorAbort(BatchOpsError):
    """Internal signal used to skip queued work once stopOnError trips."""

    def __init__(self):
        super().__init__("Batch stopped after failure", error_code="STOPPED_ON_ERROR")
