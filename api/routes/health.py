"""Health check routes."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.db import get_db
from claim_worker.version import __version__

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthcheck(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Tests database connectivity and returns health status.
    """
    try:
        db.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": "connected",
            "version": __version__
        }
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e)
            }
        )


@router.get("/ready")
def readiness():
    """Simple check that the service is ready to handle requests."""
    return {"status": "ready"}


@router.get("/live")
def liveness():
    return {"status": "alive"}
