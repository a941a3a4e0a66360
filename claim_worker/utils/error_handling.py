"""
Error handling utilities for the claim worker.

This module provides common database error handling functions used by the
ledger services and the sweep loop.
"""
from typing import Optional, Any, Dict

from sqlalchemy.exc import IntegrityError, OperationalError

from claim_worker.exceptions import DatabaseError, ErrorCode
from claim_worker.utils.logging import get_context_logger

# PostgreSQL SQLSTATE raised by FOR UPDATE NOWAIT when the row is locked
LOCK_NOT_AVAILABLE_SQLSTATE = "55P03"


def _sqlstate(exception: Exception) -> Optional[str]:
    """Extract the PostgreSQL SQLSTATE from a (possibly wrapped) DBAPI error."""
    orig = getattr(exception, "orig", exception)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_lock_not_available(exception: Exception) -> bool:
    """
    Determine if an exception is a NOWAIT lock failure.

    Args:
        exception: The exception to check

    Returns:
        True if another transaction holds the lock the statement asked for
    """
    if _sqlstate(exception) == LOCK_NOT_AVAILABLE_SQLSTATE:
        return True
    if isinstance(exception, OperationalError):
        return "could not obtain lock" in str(exception).lower()
    return False


def is_unique_violation(exception: Exception) -> bool:
    """Determine if an exception is a unique constraint violation."""
    if not isinstance(exception, IntegrityError):
        return False
    if _sqlstate(exception) == "23505":
        return True
    error_str = str(exception).lower()
    return "duplicate key" in error_str or "unique constraint" in error_str


def handle_database_error(
    exception: Exception,
    operation: str,
    logger: Any = None,
    trace_id: Optional[str] = None,
    error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Standardized handler for database errors.

    Args:
        exception: The exception that occurred
        operation: Description of the operation that failed
        logger: Logger instance to use (optional)
        trace_id: Trace ID for logging context (optional)
        error_code: Error code to use (default: DATABASE_ERROR)
        details: Additional error details (optional)

    Raises:
        DatabaseError: A standardized error wrapping the original exception
    """
    if logger is None:
        logger = get_context_logger("database", trace_id=trace_id)

    error_msg = f"Database error in {operation}: {str(exception)}"
    error_details = dict(details or {})

    if isinstance(exception, IntegrityError):
        error_code = ErrorCode.DATABASE_CONSTRAINT_ERROR
        if is_unique_violation(exception):
            error_msg = f"Duplicate data in {operation}: {str(exception)}"
            error_details["error_type"] = "duplicate_key"

    elif isinstance(exception, OperationalError):
        error_str = str(exception).lower()
        if "timeout" in error_str or "timed out" in error_str:
            error_code = ErrorCode.TIMEOUT_ERROR
            error_msg = f"Database timeout in {operation}: {str(exception)}"
            error_details["error_type"] = "timeout"
        elif "connection" in error_str or "server closed" in error_str:
            error_code = ErrorCode.DATABASE_CONNECTION_ERROR
            error_msg = f"Database connection error in {operation}: {str(exception)}"
            error_details["error_type"] = "connection_error"

    logger.error(error_msg)

    raise DatabaseError(
        error_msg,
        error_code=error_code,
        original_exception=exception,
        operation=operation,
        details=error_details
    )
