"""
Ledger read service.

Read-only queries used by operators and the ops API.
"""
from typing import Optional, List, Dict, Any

from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from sqlalchemy.exc import SQLAlchemyError

from db.models.requests import RequestModel, RequestStatus, RequestKind
from claim_worker.exceptions import ValidationError, ResourceNotFoundError
from claim_worker.utils.error_handling import handle_database_error
from claim_worker.utils.logging import get_context_logger

DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500


def get_request(db: Session, request_id: int, trace_id: Optional[str] = None) -> RequestModel:
    """
    Fetch one request by id.

    Raises:
        ResourceNotFoundError: If no such request exists
        DatabaseError: If the query fails
    """
    logger = get_context_logger("ledger_service", trace_id=trace_id, request_id=request_id)
    try:
        request = db.query(RequestModel).filter(RequestModel.id == request_id).first()
    except SQLAlchemyError as e:
        handle_database_error(e, "get_request", logger=logger)

    if request is None:
        raise ResourceNotFoundError(
            f"Request {request_id} not found",
            resource_type="request",
            resource_id=str(request_id)
        )
    return request


def list_requests(
    db: Session,
    status: Optional[str] = None,
    target_id: Optional[str] = None,
    kind: Optional[str] = None,
    after_id: Optional[int] = None,
    limit: int = DEFAULT_LIST_LIMIT,
    trace_id: Optional[str] = None
) -> List[RequestModel]:
    """
    List requests in ascending id order.

    Args:
        db: Database session
        status: Filter by status (optional)
        target_id: Filter by target (optional)
        kind: Filter by kind (optional)
        after_id: Only return ids greater than this, for paging (optional)
        limit: Maximum rows to return, 1 to 500

    Raises:
        ValidationError: If a filter value or the limit is invalid
        DatabaseError: If the query fails
    """
    logger = get_context_logger("ledger_service", trace_id=trace_id)

    if not isinstance(limit, int) or limit < 1 or limit > MAX_LIST_LIMIT:
        raise ValidationError(
            f"limit must be between 1 and {MAX_LIST_LIMIT}",
            field="limit",
            value=limit
        )
    if status is not None and status not in [s.value for s in RequestStatus]:
        raise ValidationError(
            f"status must be one of: {', '.join(s.value for s in RequestStatus)}",
            field="status",
            value=status
        )
    if kind is not None and kind not in [k.value for k in RequestKind]:
        raise ValidationError(
            f"kind must be one of: {', '.join(k.value for k in RequestKind)}",
            field="kind",
            value=kind
        )

    query = db.query(RequestModel)
    if status is not None:
        query = query.filter(RequestModel.status == status)
    if target_id is not None:
        query = query.filter(RequestModel.target_id == target_id)
    if kind is not None:
        query = query.filter(RequestModel.kind == kind)
    if after_id is not None:
        query = query.filter(RequestModel.id > after_id)

    try:
        return query.order_by(RequestModel.id.asc()).limit(limit).all()
    except SQLAlchemyError as e:
        handle_database_error(e, "list_requests", logger=logger)


def get_ledger_stats(db: Session, trace_id: Optional[str] = None) -> Dict[str, Any]:
    """Count requests per status."""
    logger = get_context_logger("ledger_service", trace_id=trace_id)
    try:
        rows = (
            db.query(RequestModel.status, func.count(RequestModel.id))
            .group_by(RequestModel.status)
            .all()
        )
    except SQLAlchemyError as e:
        handle_database_error(e, "get_ledger_stats", logger=logger)

    counts = {status.value: 0 for status in RequestStatus}
    for status, count in rows:
        counts[status] = count
    return {"by_status": counts, "total": sum(counts.values())}
