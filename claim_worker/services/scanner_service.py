"""
Scanner service.

Finds the next claimable request after a cursor position.
"""
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from db.models.requests import RequestModel, RequestStatus
from claim_worker.exceptions import ValidationError
from claim_worker.utils.error_handling import handle_database_error
from claim_worker.utils.logging import get_context_logger

# Ids start at 1, so every sweep begins strictly after 0
MIN_CURSOR = 0


def scan_next_request(
    db: Session,
    cursor: int = MIN_CURSOR,
    trace_id: Optional[str] = None
) -> Optional[RequestModel]:
    """
    Lock and return the lowest-id 'new' request with id greater than cursor.

    Rows already locked by other workers are skipped rather than waited on,
    so concurrent scanners never block each other. The returned row stays
    locked until the caller's transaction ends.

    Args:
        db: Database session inside an open claim transaction
        cursor: Exclusive lower bound on the request id
        trace_id: Trace ID for logging (optional)

    Returns:
        The locked RequestModel, or None when nothing claimable remains

    Raises:
        ValidationError: If cursor is not a non-negative integer
        DatabaseError: If the query fails
    """
    logger = get_context_logger("scanner_service", trace_id=trace_id)

    if isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < MIN_CURSOR:
        raise ValidationError(
            "cursor must be a non-negative integer",
            field="cursor",
            value=cursor
        )

    try:
        request = (
            db.query(RequestModel)
            .filter(
                RequestModel.status == RequestStatus.NEW.value,
                RequestModel.id > cursor
            )
            .order_by(RequestModel.id.asc())
            .with_for_update(skip_locked=True)
            .first()
        )
    except SQLAlchemyError as e:
        handle_database_error(e, "scan_next_request", logger=logger, trace_id=trace_id)

    if request is None:
        logger.debug(f"No claimable request after cursor {cursor}")
    else:
        logger.debug(f"Scanned request {request.id} ({request.kind}) for target {request.target_id}")
    return request
