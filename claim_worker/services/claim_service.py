"""
Claim service.

Turns a scanned request into a claimed group owned by a fresh claim owner.
Nothing written here is visible to other workers until settlement commits.
"""
import uuid
from typing import Optional, List

from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from db.models.requests import RequestModel, RequestStatus, RequestKind
from claim_worker.exceptions import LockConflictError
from claim_worker.schemas import ClaimedGroup, RequestSnapshot
from claim_worker.utils.error_handling import is_lock_not_available, handle_database_error
from claim_worker.utils.logging import get_context_logger


def generate_claim_owner() -> str:
    """Return a fresh identifier for one claim attempt."""
    return uuid.uuid4().hex


def _lock_dependent_group(db: Session, request: RequestModel) -> List[RequestModel]:
    return (
        db.query(RequestModel)
        .filter(
            RequestModel.target_id == request.target_id,
            RequestModel.kind == RequestKind.DEPENDENT.value,
            RequestModel.status.in_(RequestStatus.non_terminal())
        )
        .order_by(RequestModel.id.asc())
        .with_for_update(nowait=True)
        .all()
    )


def claim_request_group(
    db: Session,
    request: RequestModel,
    trace_id: Optional[str] = None
) -> ClaimedGroup:
    """
    Claim the scanned request, together with its outstanding siblings when
    it is a dependent.

    A primary is claimed alone. A dependent is claimed with every other
    outstanding dependent of the same target, all or nothing.

    Args:
        db: Database session inside the claim transaction
        request: The scanned (and locked) request
        trace_id: Trace ID for logging (optional)

    Returns:
        ClaimedGroup describing the rows now owned by this claim

    Raises:
        LockConflictError: If any group member is locked by another worker
        DatabaseError: For any other database failure
    """
    claim_owner = generate_claim_owner()
    logger = get_context_logger(
        "claim_service",
        trace_id=trace_id,
        target_id=request.target_id,
        request_id=request.id,
        claim_owner=claim_owner
    )

    if request.kind == RequestKind.DEPENDENT.value:
        try:
            members = _lock_dependent_group(db, request)
        except OperationalError as e:
            if is_lock_not_available(e):
                logger.debug("Dependent group is partially locked by another worker")
                raise LockConflictError(
                    f"Dependent group for target {request.target_id} is locked",
                    request_id=request.id,
                    target_id=request.target_id,
                    reason="group_locked",
                    original_exception=e
                )
            handle_database_error(e, "claim_request_group", logger=logger)
        except SQLAlchemyError as e:
            handle_database_error(e, "claim_request_group", logger=logger)
    else:
        members = [request]

    try:
        for member in members:
            member.status = RequestStatus.IN_PROGRESS.value
            member.claim_owner = claim_owner
            member.claimed_at = func.now()
            member.updated_at = func.now()
        db.flush()
    except SQLAlchemyError as e:
        handle_database_error(e, "claim_request_group", logger=logger)

    logger.info(f"Claimed {len(members)} {request.kind} request(s)")

    return ClaimedGroup(
        claim_owner=claim_owner,
        anchor_id=request.id,
        target_id=request.target_id,
        kind=RequestKind(request.kind),
        requests=[
            RequestSnapshot(
                id=member.id,
                kind=RequestKind(member.kind),
                target_id=member.target_id,
                claim_owner=claim_owner,
                payload=member.payload or {},
                created_at=member.created_at
            )
            for member in members
        ]
    )
