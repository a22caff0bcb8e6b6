"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the package,
with automatic logging and correlation ID tracking. Error context must never
carry key material, plaintext credentials, encoded blobs or full identifiers.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    CONFLICT = "3002"

    # Security errors (6xxx)
    AUTHENTICATION_FAILED = "6000"


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
            **context: Additional context information
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
        # Import logger here to avoid circular dependency at module load time
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
            logger.error(
                f"Error {self.error_code.value}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)

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

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


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
        """Initialize repository error with database context."""
        super().__init__(message, error_code, status_code, cause, **context)


class ValidationError(BaseError):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class ConfigurationError(BaseError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, setting: Optional[str] = None, **context):
        if setting:
            context["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, 500, **context)


# ==================== IDENTIFIER RESOLUTION EXCEPTIONS ====================


class InvalidCandidateError(ValidationError):
    """Raised when an identifier candidate is empty, too long or not hexadecimal."""

    def __init__(self, message: str = "Invalid identifier candidate", **kwargs):
        super().__init__(
            message, field="candidate", error_code=ErrorCode.INVALID_FORMAT, **kwargs
        )


class UnsupportedStorageEncodingError(BaseError):
    """Raised when an entity type stores its identifier in an unrecognized encoding."""

    def __init__(self, message: str = "Unsupported identifier storage encoding", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.CONFIGURATION_ERROR, status_code=500, **kwargs
        )


class StorageIntegrityViolationError(RepositoryError):
    """Raised when a full identifier matches more than one stored row."""

    def __init__(self, message: str = "Duplicate identifier in storage", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONSTRAINT_VIOLATION,
            status_code=500,
            **kwargs,
        )


class AmbiguousIdentifierError(BaseError):
    """Raised by raising lookups when a partial identifier matches several entities."""

    def __init__(self, message: str = "Identifier is ambiguous", match_count: int = 2, **kwargs):
        self.match_count = match_count
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFLICT,
            status_code=409,
            match_count=match_count,
            **kwargs,
        )


# ==================== CIPHER EXCEPTIONS ====================


class CipherError(BaseError):
    """Base exception for credential cipher failures."""

    def __init__(
        self,
        message: str = "Credential cipher error",
        error_code: ErrorCode = ErrorCode.INVALID_FORMAT,
        status_code: int = 400,
        **kwargs,
    ):
        super().__init__(message=message, error_code=error_code, status_code=status_code, **kwargs)


class InvalidKeyLengthError(CipherError):
    """Raised when key material is not exactly 32 bytes."""

    def __init__(self, message: str = "Key material must be exactly 32 bytes", **kwargs):
        super().__init__(message=message, **kwargs)


class DecodingError(CipherError):
    """Raised when an encoded blob or key is not valid base64 text."""

    def __init__(self, message: str = "Value is not valid base64 text", **kwargs):
        super().__init__(message=message, **kwargs)


class MalformedBlobError(CipherError):
    """Raised when a decoded blob cannot hold a nonce and an authentication tag."""

    def __init__(self, message: str = "Encrypted blob is malformed", **kwargs):
        super().__init__(message=message, **kwargs)


class AuthenticationFailureError(CipherError):
    """Raised for every tag verification failure, whatever the cause."""

    def __init__(self, message: str = "Credential authentication failed", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHENTICATION_FAILED,
            status_code=401,
            **kwargs,
        )


# Factory functions for common error patterns
def not_found(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """
    Factory for not found errors.

    Args:
        resource_type: Type of resource (e.g., 'Project')
        cause: Original exception if any
        **identifiers: Resource identifiers (e.g., prefix_length=8)

    Returns:
        Configured RepositoryError instance with 404 status
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} not found"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return RepositoryError(
        message,
        error_code=ErrorCode.NOT_FOUND,
        status_code=404,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def validation_failed(
    field: str, reason: str, cause: Optional[Exception] = None, **context
) -> ValidationError:
    """
    Factory for validation errors.

    Values are deliberately not recorded; callers pass only non-sensitive context.

    Args:
        field: Field that failed validation
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        Configured ValidationError instance
    """
    return ValidationError(
        f"Validation failed for {field}: {reason}",
        field=field,
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        reason=reason,
        **context,
    )


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
