"""Read-only routes over the request ledger."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from api.models.responses import APIResponse, RequestOut
from db.db import get_db
from claim_worker.services import ledger_service

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("")
def list_requests(
    request: Request,
    status: Optional[str] = None,
    target_id: Optional[str] = None,
    kind: Optional[str] = None,
    after_id: Optional[int] = Query(None, ge=0),
    limit: int = Query(ledger_service.DEFAULT_LIST_LIMIT),
    db: Session = Depends(get_db)
):
    """
    List ledger requests in id order.

    Page with after_id set to the last id of the previous page.
    """
    rows = ledger_service.list_requests(
        db,
        status=status,
        target_id=target_id,
        kind=kind,
        after_id=after_id,
        limit=limit,
        trace_id=getattr(request.state, "trace_id", None)
    )
    items = [RequestOut.model_validate(row).model_dump() for row in rows]
    return APIResponse.success(data={
        "items": items,
        "count": len(items),
        "next_after_id": items[-1]["id"] if len(items) == limit else None
    })


@router.get("/stats")
def ledger_stats(request: Request, db: Session = Depends(get_db)):
    """Counts of requests per status."""
    stats = ledger_service.get_ledger_stats(db, trace_id=getattr(request.state, "trace_id", None))
    return APIResponse.success(data=stats)


@router.get("/{request_id}")
def get_request(request_id: int, request: Request, db: Session = Depends(get_db)):
    row = ledger_service.get_request(db, request_id, trace_id=getattr(request.state, "trace_id", None))
    return APIResponse.success(data=RequestOut.model_validate(row).model_dump())
