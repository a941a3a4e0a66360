"""
Settlement service.

Finalizes a claim and ends its transaction.
"""
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from sqlalchemy.exc import SQLAlchemyError

from db.models.requests import RequestModel, RequestStatus
from claim_worker.exceptions import ValidationError
from claim_worker.utils.error_handling import handle_database_error
from claim_worker.utils.logging import get_context_logger

MAX_ERROR_DETAIL_LENGTH = 4000


def settle_claim(
    db: Session,
    claim_owner: str,
    succeeded: bool,
    error_detail: Optional[str] = None,
    trace_id: Optional[str] = None
) -> int:
    """
    Move every row owned by the claim to its terminal status and commit.

    The commit releases the claim's row locks.

    Args:
        db: Database session holding the claim transaction
        claim_owner: Identifier generated for the claim
        succeeded: True for 'complete', False for 'error'
        error_detail: Failure reason stored on error (optional)
        trace_id: Trace ID for logging (optional)

    Returns:
        Number of rows settled

    Raises:
        ValidationError: If claim_owner is empty
        DatabaseError: If the update or commit fails
    """
    logger = get_context_logger("settlement_service", trace_id=trace_id, claim_owner=claim_owner)

    if not claim_owner:
        raise ValidationError("claim_owner is required", field="claim_owner")

    status = RequestStatus.COMPLETE if succeeded else RequestStatus.ERROR
    detail = None
    if not succeeded:
        detail = (error_detail or "execution failed")[:MAX_ERROR_DETAIL_LENGTH]

    try:
        settled = (
            db.query(RequestModel)
            .filter(
                RequestModel.claim_owner == claim_owner,
                RequestModel.status == RequestStatus.IN_PROGRESS.value
            )
            .update(
                {
                    RequestModel.status: status.value,
                    RequestModel.error_detail: detail,
                    RequestModel.settled_at: func.now(),
                    RequestModel.updated_at: func.now(),
                },
                synchronize_session=False
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        handle_database_error(e, "settle_claim", logger=logger, trace_id=trace_id)

    if settled == 0:
        logger.warning("Settlement matched no in-progress rows")
    else:
        logger.info(f"Settled {settled} request(s) as {status.value}")
    return settled
