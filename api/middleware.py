"""Middleware for the API."""
import time
import uuid
from fastapi import Request

from claim_worker.utils.logging import get_context_logger

logger = get_context_logger("api_middleware")


async def request_logging_middleware(request: Request, call_next):
    """
    Log every request as one structured entry.

    The trace id is taken from X-Trace-ID when the caller sends one and is
    echoed back on the response.
    """
    trace_id = request.headers.get("X-Trace-ID") or str(uuid.uuid4())
    request.state.trace_id = trace_id

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000

    log_data = {
        "trace_id": trace_id,
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": round(duration_ms, 2),
        "client_ip": request.client.host if request.client else None
    }

    if response.status_code >= 500:
        logger.error("request_completed", extra=log_data)
    elif response.status_code >= 400:
        logger.warning("request_completed", extra=log_data)
    else:
        logger.info("request_completed", extra=log_data)

    response.headers["X-Trace-ID"] = trace_id
    return response
