"""
Application-level exceptions.

These are the errors the service layer raises and the API layer renders.
Every exception carries:

- message: short, human-friendly summary (safe to show to clients)
- details: longer explanation for the client (never raw database text)
- fields: optional list of field names related to the error (e.g. ['name'])
- constraint: optional DB constraint name (for logs only, never in payloads)
- error_code: canonical short code mapped to an HTTP status
"""

from typing import Iterable

from config_service.validators.application_validators import ValidationIssue, format_issues


class ServiceError(Exception):
    """Base exception for repository/service errors."""

    # Map canonical error_code -> HTTP status.
    ERROR_CODE_TO_STATUS = {
        "validation_failed": 422,
        "duplicate": 409,
        "internal": 500,
    }

    def __init__(self, message: str, *, details: str | None = None, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.details:
            parts.append(self.details)
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return the JSON body for HTTP responses:
            {"message": "...", "details": "..."}
        The constraint name is intentionally left out.
        """
        return {"message": self.message, "details": self.details}

    def http_status(self) -> int:
        """
        HTTP status for this error, looked up by error_code.
        Errors without a known code are server-side failures (500).
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)
        return 500


class ValidationFailedError(ServiceError):
    """Client input rejected before any I/O."""

    def __init__(self, issues: Iterable[ValidationIssue]):
        self.issues = list(issues)
        super().__init__(
            "Validation failed",
            details=format_issues(self.issues),
            fields=sorted({issue.field for issue in self.issues}),
            error_code="validation_failed",
        )


class DuplicateError(ServiceError):
    """A uniqueness constraint rejected the write."""

    def __init__(self, message: str, *, details: str | None = None, fields: Iterable[str] | None = None,
                 constraint: str | None = None):
        super().__init__(message, details=details, fields=fields, constraint=constraint, error_code="duplicate")


class ApplicationNameConflictError(DuplicateError):
    """Another application already uses this name."""

    def __init__(self, name: str, *, constraint: str | None = None):
        self.name = name
        super().__init__(
            "An application with this name already exists",
            details=f"Application name '{name}' is already in use",
            fields=["name"],
            constraint=constraint,
        )


class InternalError(ServiceError):
    """
    Anything that is not the client's fault: connectivity, unexpected store
    errors, unclassified integrity errors.
    """

    DEFAULT_DETAILS = "An unexpected error occurred. The failure has been logged."

    def __init__(self, message: str = "An internal error occurred", *, details: str | None = None,
                 fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, details=details or self.DEFAULT_DETAILS, fields=fields,
                         constraint=constraint, error_code="internal")


class RepositoryError(InternalError):
    """Raised by repositories when a database operation fails."""
    pass


__all__ = [
    "ServiceError",
    "ValidationFailedError",
    "DuplicateError",
    "ApplicationNameConflictError",
    "InternalError",
    "RepositoryError",
]
