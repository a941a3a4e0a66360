"""FastAPI application factory and configuration."""
from fastapi import FastAPI

from api.middleware import request_logging_middleware
from api.exceptions import register_exception_handlers
from api.routes import health, requests
from claim_worker.version import __version__


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Request Ledger API",
        version=__version__,
        description="Read-only operational view of the request ledger"
    )

    app.middleware("http")(request_logging_middleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(requests.router)

    return app
