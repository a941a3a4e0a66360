"""Centralized exception handlers for the API."""
from fastapi import Request
from fastapi.responses import JSONResponse

from claim_worker.exceptions import BaseAppException
from claim_worker.utils.logging import get_context_logger
from api.error_codes import get_http_status

logger = get_context_logger("api_exceptions")


def handle_app_exception(request: Request, exc: BaseAppException) -> JSONResponse:
    """
    Handle all application exceptions.

    Maps internal error codes to HTTP status codes and returns structured
    error responses. Stack traces never leave the process.
    """
    status_code, default_message = get_http_status(exc.error_code)

    error_content = {
        "success": False,
        "error": {
            "code": exc.error_code.value,
            "message": exc.message or default_message,
            "type": exc.__class__.__name__
        }
    }

    trace_id = getattr(request.state, "trace_id", None)
    if trace_id:
        error_content["trace_id"] = trace_id

    if exc.details:
        details = {k: v for k, v in exc.details.items() if k != "original_error"}
        if details:
            error_content["error"]["details"] = details

    if status_code >= 500:
        logger.error(
            f"{exc.error_code.name}: {exc.message}",
            extra={"trace_id": trace_id, "path": request.url.path}
        )

    return JSONResponse(status_code=status_code, content=error_content)


def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions that weren't caught by custom handlers.

    Logs the full exception and returns a generic error to the client.
    """
    trace_id = getattr(request.state, "trace_id", "unknown")

    logger.exception(
        "Unexpected exception in API",
        extra={
            "trace_id": trace_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "type": "InternalServerError"
            },
            "trace_id": trace_id
        }
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(BaseAppException, handle_app_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
