"""
Exception definitions for the claim worker.
Defines custom exceptions used throughout the ledger services and sweep loop.
"""
from enum import Enum
from typing import Optional, Dict, Any
import traceback

class ErrorCode(Enum):
    """Standardized error codes for application exceptions."""
    # Validation errors (1000-1999)
    VALIDATION_ERROR = 1000

    # Resource errors (2000-2999)
    RESOURCE_NOT_FOUND = 2000
    RESOURCE_ALREADY_EXISTS = 2001

    # Database errors (4000-4999)
    DATABASE_ERROR = 4000
    DATABASE_CONNECTION_ERROR = 4001
    DATABASE_CONSTRAINT_ERROR = 4002
    LOCK_CONFLICT = 4003

    # Service errors (5000-5999)
    DEPENDENCY_ERROR = 5001
    TIMEOUT_ERROR = 5002

    # Execution errors (6000-6999)
    EXECUTION_ERROR = 6000

    # Configuration errors (7000-7999)
    CONFIGURATION_ERROR = 7000

    # System errors (9000-9999)
    INTERNAL_ERROR = 9000


class BaseAppException(Exception):
    """Base exception for all application exceptions."""
    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        original_exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.message = message
        self.error_code = error_code
        self.original_exception = original_exception
        self.details = details or {}
        self.stack_trace = traceback.format_exc() if original_exception else None

        # Add additional kwargs to details
        for key, value in kwargs.items():
            self.details[key] = value

        # Add original exception message to details if available
        if original_exception:
            self.details["original_error"] = str(original_exception)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        result = {
            "error_code": self.error_code.value,
            "error_type": self.error_code.name,
            "message": self.message
        }

        if self.details:
            result["details"] = self.details

        # Stack trace should only be included in development/debugging
        # and filtered out before sending to clients
        if self.stack_trace:
            result["stack_trace"] = self.stack_trace

        return result


class ValidationError(BaseAppException):
    """Exception raised for validation errors."""
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""
    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class DuplicateError(BaseAppException):
    """Exception raised when a request would create a second active primary for a target."""
    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_ALREADY_EXISTS,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class DatabaseError(BaseAppException):
    """Exception raised for database errors."""
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class ConfigurationError(BaseAppException):
    """Exception raised for invalid worker configuration."""
    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class ClaimRejectedError(BaseAppException):
    """
    Base for claim attempts that must be abandoned.

    The enclosing transaction is rolled back and the sweep cursor moves past
    the scanned request. Never surfaced outside the sweep loop.
    """
    def __init__(
        self,
        message: str,
        request_id: Optional[int] = None,
        target_id: Optional[str] = None,
        reason: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.LOCK_CONFLICT,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if request_id is not None:
            details["request_id"] = request_id
        if target_id:
            details["target_id"] = target_id
        if reason:
            details["reason"] = reason
        self.request_id = request_id
        self.reason = reason

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class LockConflictError(ClaimRejectedError):
    """Another worker holds a row lock this claim needs."""
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.LOCK_CONFLICT, **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)


class DependencyNotReadyError(ClaimRejectedError):
    """A dependent request's primary has not completed."""
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.DEPENDENCY_ERROR, **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)


class ExecutionFailedError(BaseAppException):
    """Raised by work executors that report failure by exception."""
    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if target_id:
            details["target_id"] = target_id

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            **kwargs
        )
