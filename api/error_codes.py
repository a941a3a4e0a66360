"""Centralized error code to HTTP status mapping."""
from claim_worker.exceptions import ErrorCode

# Map internal error codes to HTTP status codes and user-friendly messages
ERROR_CODE_MAP = {
    ErrorCode.VALIDATION_ERROR: {
        "status": 422,
        "message": "Validation failed"
    },
    ErrorCode.RESOURCE_NOT_FOUND: {
        "status": 404,
        "message": "Resource not found"
    },
    ErrorCode.RESOURCE_ALREADY_EXISTS: {
        "status": 409,
        "message": "Target already has a pending primary request"
    },
    ErrorCode.DATABASE_ERROR: {
        "status": 500,
        "message": "Database operation failed"
    },
    ErrorCode.DATABASE_CONNECTION_ERROR: {
        "status": 503,
        "message": "Database unavailable"
    },
    ErrorCode.TIMEOUT_ERROR: {
        "status": 504,
        "message": "Database operation timed out"
    },
    ErrorCode.CONFIGURATION_ERROR: {
        "status": 500,
        "message": "Service misconfigured"
    },
    ErrorCode.INTERNAL_ERROR: {
        "status": 500,
        "message": "Internal server error"
    },
}


def get_http_status(error_code: ErrorCode) -> tuple[int, str]:
    """
    Get HTTP status code and message for an error code.

    Args:
        error_code: Internal error code

    Returns:
        Tuple of (status_code, message)
    """
    mapping = ERROR_CODE_MAP.get(error_code, {
        "status": 500,
        "message": "Internal server error"
    })

    return mapping["status"], mapping["message"]
