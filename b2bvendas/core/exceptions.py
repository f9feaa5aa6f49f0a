"""Structured exception hierarchy for consistent error handling.

Every error a service or repository raises derives from ``AppError``. Each
subclass fixes the HTTP status and the machine readable ``ErrorCode`` that the
API exception handlers put in the ``{"error", "code"}`` envelope, so no route
handler needs its own translation logic.

Key components:
- **ErrorCode enum**: Stable error identifiers returned to API clients
- **Severity enum**: Error classification for monitoring and alerting
- **AppError**: Base exception with context, cause chaining and fingerprinting
- **Specialized exceptions**: One per HTTP failure class
"""

import hashlib
import traceback
from enum import Enum
from typing import Any, ClassVar, Self


class ErrorCode(Enum):
    """Error codes returned in the ``code`` field of error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """The request has no valid session or the session lacks the required role."""

    FORBIDDEN = "FORBIDDEN"
    """The user is authenticated but may not touch the requested record."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    CONFLICT = "CONFLICT"
    """The request collides with existing data (duplicate email, CNPJ, SKU...)."""

    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    """The operation is well formed but breaks a business rule."""

    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    """The client IP sent too many requests in the current window."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting."""

    LOW = "LOW"
    """Expected errors caused by user input."""

    MEDIUM = "MEDIUM"
    """Errors that block an operation but are part of normal behaviour."""

    HIGH = "HIGH"
    """Security relevant or data integrity errors."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class AppError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, returned to the client as-is
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    status_code: ClassVar[int] = 500

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Returns:
            str: A hash of the error type, code and the raising location
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "b2bvendas/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether the error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether the error should trigger alerts (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(AppError):
    """Input does not meet the expected format or a simple precondition.

    Args:
        message: Description of the validation failure
        error_code: Error code (defaults to VALIDATION_ERROR)
        context: Additional context, e.g. ``{"validation_errors": {...}}``
        cause: The original exception that caused this error
    """

    status_code: ClassVar[int] = 400

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(AppError):
    """The request is not authenticated or the session lacks the required role."""

    status_code: ClassVar[int] = 401

    def __init__(
        self,
        message: str = "Não autorizado",
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class ForbiddenError(AppError):
    """The user is authenticated but does not own the requested record."""

    status_code: ClassVar[int] = 403

    def __init__(
        self,
        message: str = "Acesso negado",
        error_code: str | ErrorCode = ErrorCode.FORBIDDEN,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class NotFoundError(AppError):
    """A requested resource does not exist (or is not visible to the caller).

    Args:
        message: Description of what resource was not found
        error_code: Error code (defaults to NOT_FOUND)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    status_code: ClassVar[int] = 404

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)

    @classmethod
    def for_resource(cls, resource: str, **context: Any) -> Self:
        """Build the standard "<Resource> não encontrado" error."""
        return cls(f"{resource} não encontrado", context=context or None)


class ConflictError(AppError):
    """The operation would duplicate data that must be unique."""

    status_code: ClassVar[int] = 409

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFLICT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class BusinessRuleViolationError(AppError):
    """Exception raised when an operation violates a business rule.

    Used for constraints that go beyond input validation, such as circular
    category references, insufficient stock or invalid order transitions.
    """

    status_code: ClassVar[int] = 422

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.BUSINESS_RULE_VIOLATION,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class RateLimitExceededError(AppError):
    """The client sent more requests than the configured window allows."""

    status_code: ClassVar[int] = 429

    def __init__(
        self,
        message: str = "Muitas requisições. Tente novamente mais tarde.",
        error_code: str | ErrorCode = ErrorCode.RATE_LIMIT_EXCEEDED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)
