"""
Consolidated exception system with error codes, context, and correlation support.

Every failure in the provisioning and resolution paths is raised as one of
these typed errors. Each error logs itself on construction and can render
itself for API responses via ``to_dict``.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONNECTION_ERROR = "1002"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    TYPE_MISMATCH = "2003"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    CONFLICT = "3002"

    # Access errors (4xxx)
    PERMISSION_DENIED = "4003"
    UNAUTHENTICATED = "4005"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information (never credential values)
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Lazy import, the logger module imports config which imports nothing from here
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(f"Error {self.error_code}: {self.message}", extra=log_data)
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code}: {self.message}", extra=log_data)

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for API responses.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Malformed input. Surfaced immediately, never retried."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class NotFoundError(RepositoryError):
    """No record matches the requested identifier."""

    def __init__(self, message: str = "Resource not found", **kwargs):
        super().__init__(message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class ConflictError(RepositoryError):
    """A unique key is already taken on an administrative create."""

    def __init__(self, message: str = "Resource already exists", **kwargs):
        super().__init__(message, error_code=ErrorCode.DUPLICATE, status_code=409, **kwargs)


class TransportError(RepositoryError):
    """The backing store could not be reached or the call timed out."""

    def __init__(
        self,
        message: str = "Backing store unavailable",
        error_code: ErrorCode = ErrorCode.CONNECTION_ERROR,
        **kwargs,
    ):
        super().__init__(message, error_code=error_code, status_code=503, **kwargs)


class AuthenticationError(BaseError):
    """Missing or invalid bearer credential on the administrative surface."""

    def __init__(self, message: str = "Authentication required", **kwargs):
        super().__init__(
            message, error_code=ErrorCode.UNAUTHENTICATED, status_code=401, **kwargs
        )


# ==================== CONNECTION RESOLUTION EXCEPTIONS ====================


class ConnectionNotFoundError(NotFoundError):
    """
    Raised when a plugin asks for a connection that was never provisioned.

    Terminal for the plugin invocation: it points at a provisioning gap,
    not a transient condition.
    """

    def __init__(self, message: Optional[str] = None, external_id: Optional[str] = None, **kwargs):
        if message is None:
            message = f"No connection found with external id '{external_id}'"
        if external_id is not None:
            kwargs["connection_external_id"] = external_id
        super().__init__(message, **kwargs)
        self.external_id = external_id


class MissingTenantIdentityError(BaseError):
    """Raised when the host did not supply the project external id for an invocation."""

    def __init__(
        self,
        message: str = "Project external id is required to resolve a predefined connection",
        **kwargs,
    ):
        super().__init__(
            message, error_code=ErrorCode.CONFIGURATION_ERROR, status_code=500, **kwargs
        )


# Factory functions for common error patterns
def not_found(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> NotFoundError:
    """
    Factory for not found errors.

    Args:
        resource_type: Type of resource (e.g., 'Project', 'Connection')
        cause: Original exception if any
        **identifiers: Resource identifiers (e.g., external_id='org_1')

    Returns:
        Configured NotFoundError instance
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} not found"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return NotFoundError(message, cause=cause, resource_type=resource_type, **identifiers)


def duplicate(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> ConflictError:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'Connection')
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        Configured ConflictError instance
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"Duplicate {resource_type}"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return ConflictError(message, cause=cause, resource_type=resource_type, **identifiers)


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
